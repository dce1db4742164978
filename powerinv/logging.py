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
Sets up logging for powerinv.

Modules log through their own logger, obtained with
`logging.getLogger(__name__)`, so every message carries the name of the
module that logged it and inherits the handlers configured here on the
top-level powerinv logger.
"""
import logging
import os

from powerinv.config import get_config_value

PACKAGE_LOGGER_NAME = __name__.split('.', 1)[0]
# Loggers of other packages whose messages share the powerinv handlers.
# The py.warnings logger receives warnings captured by logging.captureWarnings.
SHARED_LOGGER_NAMES = ('paramiko', 'py.warnings')

CONSOLE_LOG_FORMAT = '%(levelname)s: %(message)s'
FILE_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(threadName)s - %(name)s - %(message)s'
LOGGER = logging.getLogger(__name__)


def _get_level(option):
    """Get the logging level named by the given logging config option."""
    return getattr(logging, get_config_value(option).upper())


def _get_console_handler(level):
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT))
    return handler


def _get_file_handler(file_name, level):
    """Get a handler writing to the log file, creating its directory if needed.

    Args:
        file_name (str): the path of the log file.
        level (int): the level of the handler.

    Returns:
        The logging.FileHandler, or None if the log file cannot be opened.
    """
    log_dir = os.path.dirname(file_name)
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
        except OSError as err:
            LOGGER.warning("Unable to create log directory '%s': %s", log_dir, err)
            return None

    try:
        handler = logging.FileHandler(filename=file_name)
    except OSError as err:
        LOGGER.warning("Unable to write to log file '%s': %s", file_name, err)
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    return handler


def bootstrap_logging():
    """Log warnings and errors to stderr until the configuration is loaded.

    The log file and the levels of the handlers are only known once the
    config file has been read, and reading it may itself log problems.

    Returns:
        None
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(_get_console_handler(logging.WARNING))


def configure_logging():
    """Replace the bootstrap handlers with those given by the logging config.

    A stderr handler at logging.stderr_level and a handler writing to
    logging.file_name at logging.file_level are added to the powerinv logger
    and to the shared loggers. If the log file cannot be opened, logging
    continues to stderr only.

    Returns:
        None
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    shared_loggers = [logging.getLogger(name) for name in SHARED_LOGGER_NAMES]
    for logger in shared_loggers:
        logger.setLevel(logging.WARNING)

    package_logger.handlers = []
    stderr_level = _get_level('logging.stderr_level')
    file_handler = _get_file_handler(get_config_value('logging.file_name'),
                                     _get_level('logging.file_level'))

    for logger in [package_logger] + shared_loggers:
        logger.addHandler(_get_console_handler(stderr_level))
        if file_handler is not None:
            logger.addHandler(file_handler)
