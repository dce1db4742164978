#
# MIT License
#
# (C) Copyright 2026 Hewlett Packard Enterprise Development LP
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included
# in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR
# OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE,
# ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR
# OTHER DEALINGS IN THE SOFTWARE.
#
"""
Loads configuration from a config file in TOML format.
"""

from collections import namedtuple
import logging
import os
from textwrap import dedent, indent

import toml

from powerinv.constants import (
    DEFAULT_HMC_REST_PORT,
    DESTINATIONS,
    REPORT_FORMATS,
    SOURCES
)

DEFAULT_CONFIG_PATH = f'{os.getenv("HOME", "/root")}/.config/powerinv/powerinv.toml'
CONFIG_FILE_ENV_VAR = 'POWERINV_CONFIG_FILE'
LOGGER = logging.getLogger(__name__)
CONFIG = None

OptionSpec = namedtuple('OptionSpec', ['type', 'default', 'validation_func', 'cmdline_arg'])


class ConfigValidationError(Exception):
    """An error occurred during validation of configuration."""
    pass


class ConfigFileExistsError(Exception):
    """The configuration file already exists and will not be overwritten."""
    pass


def validate_log_level(level):
    """Validates the given log level.

    Args:
        level (str): The log level string to validate.

    Returns:
        None

    Raises:
        ConfigValidationError: If the given `level` is not valid.
    """
    valid_log_levels = ['CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG']
    if level.upper() not in valid_log_levels:
        raise ConfigValidationError(
            "Level '{}' is not one of the valid log levels: {}".format(
                level, ", ".join(valid_log_levels)
            )
        )


def split_list_option(value):
    """Splits a comma-separated option value into a list of stripped items.

    Args:
        value (str or list): A comma-separated string, or a list that is
            returned with its items stripped.

    Returns:
        list of str: the non-empty items.
    """
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(',')
    return [item.strip().lower() for item in items if item.strip()]


def _validate_choices(option_name, choices):
    """Returns a validation function accepting comma-separated subsets of `choices`."""
    def validate(value):
        invalid = [item for item in split_list_option(value) if item not in choices]
        if invalid:
            raise ConfigValidationError(
                "Invalid {} {}; valid values are: {}".format(
                    option_name, ', '.join(invalid), ', '.join(choices)
                )
            )
    return validate


def validate_method(method):
    """Validates the HMC access method.

    Raises:
        ConfigValidationError: if `method` is neither 'rest' nor 'cli'.
    """
    if method not in SOURCES:
        raise ConfigValidationError(
            "Method '{}' is not one of: {}".format(method, ', '.join(SOURCES))
        )


def validate_positive(value):
    """Validates that an integer option is at least one.

    Raises:
        ConfigValidationError: if `value` is less than one.
    """
    if value < 1:
        raise ConfigValidationError('Value must be at least 1.')


def validate_non_negative(value):
    """Validates that an integer option is not negative.

    Raises:
        ConfigValidationError: if `value` is negative.
    """
    if value < 0:
        raise ConfigValidationError('Value must not be negative.')


validate_formats = _validate_choices('format(s)', REPORT_FORMATS)
validate_destinations = _validate_choices('destination(s)', DESTINATIONS)


POWERINV_CONFIG_SPEC = {
    'hmc': {
        'method': OptionSpec(str, 'rest', validate_method, 'method'),
        'port': OptionSpec(int, DEFAULT_HMC_REST_PORT, validate_positive, None),
        'ssh_port': OptionSpec(int, 22, validate_positive, None),
        'cert_verify': OptionSpec(bool, True, None, None),
        'timeout': OptionSpec(int, 60, validate_positive, 'timeout'),
    },
    'inventory': {
        'hmcs_file': OptionSpec(str, 'inventory/hmcs.yml', None, 'inventory'),
        'credentials_file': OptionSpec(str, 'vars/credentials.yml', None, 'credentials'),
        'group': OptionSpec(str, 'hmc_servers', None, None),
    },
    'collection': {
        'systems': OptionSpec(bool, True, None, 'collect_systems'),
        'lpars': OptionSpec(bool, True, None, 'collect_lpars'),
        'adapters': OptionSpec(bool, True, None, 'collect_adapters'),
        'max_workers': OptionSpec(int, 4, validate_positive, 'max_workers'),
        'auth_retries': OptionSpec(int, 0, validate_non_negative, None),
    },
    'output': {
        'directory': OptionSpec(str, 'output/reports', None, 'output_dir'),
        'formats': OptionSpec(str, ','.join(REPORT_FORMATS), validate_formats, 'formats'),
        'destinations': OptionSpec(str, 'local', validate_destinations, 'destinations'),
    },
    'logging': {
        'file_name': OptionSpec(str, '/var/log/powerinv/powerinv.log', None, 'logfile'),
        'file_level': OptionSpec(str, 'INFO', validate_log_level, 'loglevel'),
        'stderr_level': OptionSpec(str, 'WARNING', validate_log_level, 'loglevel'),
    },
    's3': {
        'endpoint': OptionSpec(str, '', None, None),
        'bucket': OptionSpec(str, 'power-infrastructure', None, None),
        'prefix': OptionSpec(str, 'reports', None, None),
        'region': OptionSpec(str, '', None, None),
        'access_key_file': OptionSpec(str, '', None, None),
        'secret_key_file': OptionSpec(str, '', None, None),
        'cert_verify': OptionSpec(bool, True, None, None),
    },
    'git': {
        'repo_path': OptionSpec(str, '', None, None),
        'subdirectory': OptionSpec(str, 'reports', None, None),
        'branch': OptionSpec(str, 'main', None, None),
        'remote': OptionSpec(str, 'origin', None, None),
        'push': OptionSpec(bool, True, None, None),
        'author_name': OptionSpec(str, 'powerinv', None, None),
        'author_email': OptionSpec(str, 'powerinv@localhost', None, None),
    },
    'aap': {
        'artifact_dir': OptionSpec(str, 'artifacts', None, None),
        'max_artifact_bytes': OptionSpec(int, 1048576, validate_positive, None),
    },
}


def _option_value(args, curr, spec):
    """Choose the value of an option before conversion and validation.

    A value given on the command line wins over one from the config file,
    which wins over the default of the OptionSpec. A callable default is
    called to produce the value.

    Args:
        args: a Namespace from an ArgumentParser, or None.
        curr: the value from the config file, or None if not set there.
        spec: the OptionSpec of the option.
    """
    if spec.cmdline_arg:
        args_value = getattr(args, spec.cmdline_arg, None)
        if args_value is not None:
            return args_value

    if curr is not None:
        return curr
    return spec.default() if callable(spec.default) else spec.default


def _convert_option(section, option, value, spec):
    """Convert and validate an option value, falling back on its default.

    A str option given as a TOML array is joined with commas, so lists of
    formats or destinations may be written either way.

    Returns:
        The converted value, or the default of the option if the value
        cannot be converted or fails validation.
    """
    try:
        if spec.type is str and isinstance(value, (list, tuple)):
            converted = ','.join(str(item) for item in value)
        else:
            converted = spec.type(value)
    except (TypeError, ValueError):
        LOGGER.error("Unable to convert value (%s) of option '%s' in section '%s' of "
                     "config file to the type '%s'. Defaulting to '%s'.",
                     value, option, section, spec.type.__name__, spec.default)
        return spec.default

    if spec.validation_func is not None:
        try:
            spec.validation_func(converted)
        except ConfigValidationError as err:
            LOGGER.error("Invalid value '%s' given for option '%s' in section '%s': %s "
                         "Defaulting to '%s'.", converted, option, section, err, spec.default)
            return spec.default

    return converted


def _read_config_file(config_file_path):
    """Read the TOML config file, returning an empty dict if it is unusable."""
    try:
        with open(config_file_path) as config_file:
            contents = toml.load(config_file)
    except OSError as err:
        LOGGER.error("Couldn't open config file %s; using defaults. (%s)",
                     config_file_path, err)
        return {}
    except toml.TomlDecodeError as err:
        LOGGER.error("Couldn't parse config file %s; using defaults. (%s)",
                     config_file_path, err)
        return {}

    if not contents:
        LOGGER.warning("Config file at '%s' is empty. Using default "
                       "configuration values.", config_file_path)
        return {}
    return contents


class PowerInvConfig:
    """The configuration of powerinv.

    Every option of POWERINV_CONFIG_SPEC has a value once the object is
    created: from the command line, the config file or the default, in that
    order. Sections and options missing from POWERINV_CONFIG_SPEC are
    logged and dropped.
    """

    def __init__(self, config_file_path, args=None):
        """Load the configuration from the given TOML file.

        Args:
            config_file_path (str): the path of the config file.
            args: a Namespace from an ArgumentParser whose values override
                those of the config file.
        """
        contents = _read_config_file(config_file_path)

        for section, options in contents.items():
            if section not in POWERINV_CONFIG_SPEC:
                LOGGER.warning("Ignoring unknown section '%s' in config file.", section)
                continue
            if not isinstance(options, dict):
                LOGGER.warning("Ignoring option '%s' outside of any section of config file.",
                               section)
                continue
            for option in options:
                if option not in POWERINV_CONFIG_SPEC[section]:
                    LOGGER.warning("Ignoring unknown option '%s' in section '%s' "
                                   "of config file.", option, section)

        self.sections = {}
        for section, options in POWERINV_CONFIG_SPEC.items():
            file_options = contents.get(section)
            if not isinstance(file_options, dict):
                file_options = {}
            self.sections[section] = {
                option: _convert_option(section, option,
                                        _option_value(args, file_options.get(option), spec),
                                        spec)
                for option, spec in options.items()
            }

    def get(self, section, option):
        """Get the value of an option.

        Raises:
            KeyError: if the section or the option is not known.
        """
        if section not in self.sections:
            raise KeyError(f"Couldn't find section {section} in config.")
        if option not in self.sections[section]:
            raise KeyError(f"Couldn't find option {option} in section {section}.")
        return self.sections[section][option]


def get_config_file_path():
    """Gets the config file path, honoring $POWERINV_CONFIG_FILE."""
    return os.getenv(CONFIG_FILE_ENV_VAR, DEFAULT_CONFIG_PATH)


def load_config(args=None):
    """Load the configuration into the module-level CONFIG.

    The configuration is loaded once per run; later calls do nothing.

    Args:
        args: a Namespace of command-line arguments overriding the file.

    Returns:
        None
    """
    global CONFIG

    if CONFIG is None:
        CONFIG = PowerInvConfig(get_config_file_path(), args)


def get_config_value(query_string):
    """Get the value of an option, loading the configuration if needed.

    Args:
        query_string (str): the option as '<section>.<option>', for
            example 'hmc.timeout'.

    Returns:
        The value of the option.

    Raises:
        ValueError: if the query string is not of that form.
        KeyError: if the section or option is not known.
    """
    load_config()

    parts = query_string.split('.')
    if len(parts) != 2:
        raise ValueError(f"Wrong number of levels in query string passed to "
                         f"get_config_value(). (Should be 2, was {len(parts)}.)")
    section, option = parts
    if not section or not option:
        raise ValueError(f"Improperly formatted query string supplied to "
                         f"get_config_value(). (Got '{query_string}'.)")
    return CONFIG.get(section, option)


def read_config_value_file(query_string):
    """Read the contents of a file named by a configuration value.

    Args:
        query_string (str): the '<section>.<option>' whose value is a path.

    Returns:
        str: the stripped contents of the file, or '' if the option is empty.

    Raises:
        OSError: if the file cannot be read.
    """
    path = get_config_value(query_string)
    if not path:
        return ''
    with open(path) as f:
        return f.read().strip()


def process_toml_output(toml_str):
    """Comments out non-header lines, and adds a heading to a string.

    Args:
        toml_str (str): some arbitrary TOML content.

    Returns:
        a string containing the same TOML content, with options commented
        out and a heading prepended.
    """
    heading = """\
        Default configuration file for powerinv.

        Uncomment and change an option to override its default value.

    """
    return indent(dedent(heading) + toml_str, "# ",
                  predicate=lambda line: line != '\n' and not line.startswith('['))


def generate_default_config(path=None, force=False):
    """Generates a default powerinv configuration file.

    The file is written to `path`, or to the location given by
    $POWERINV_CONFIG_FILE, or to the default location.

    Args:
        path (str): write the configuration file to the given path.
        force (bool): if True, overwrite existing configuration files.

    Returns:
        str: the path of the file written.

    Raises:
        ConfigFileExistsError: if the file exists and `force` is False.
        OSError: if the directory or file cannot be written.
    """
    config_file_path = path or get_config_file_path()
    if os.path.isfile(config_file_path) and not force:
        raise ConfigFileExistsError(
            f'Configuration file "{config_file_path}" already exists. '
            f'Not generating configuration file.'
        )

    config_file_dir = os.path.dirname(config_file_path)
    if config_file_dir:
        os.makedirs(config_file_dir, exist_ok=True)
    LOGGER.info('Creating default configuration file at %s', config_file_path)

    config_spec = {
        section: {
            option: '' if callable(spec.default) else spec.default
            for option, spec in options.items()
        }
        for section, options in POWERINV_CONFIG_SPEC.items()
    }

    with open(config_file_path, 'w') as output_stream:
        output_stream.write(process_toml_output(toml.dumps(config_spec)))

    return config_file_path
