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
Loading of the HMC inventory and HMC credentials.
"""
from collections import namedtuple
import logging

import yaml

from powerinv.config import get_config_value
from powerinv.constants import CLI_SOURCE

LOGGER = logging.getLogger(__name__)

HMCTarget = namedtuple('HMCTarget', ['identifier', 'host', 'port', 'validate_certs', 'timeout'])
Credentials = namedtuple('Credentials', ['username', 'password'])

DEFAULT_CREDENTIALS_KEY = 'default'

TRUE_STRINGS = ('yes', 'on', '1', 'true', 'y', 't')
FALSE_STRINGS = ('no', 'off', '0', 'false', 'n', 'f')


class InventoryError(Exception):
    """The HMC inventory or credentials could not be loaded."""
    pass


def _load_yaml(path, description):
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except OSError as err:
        raise InventoryError(f'Unable to read {description} file {path}: {err}') from err
    except yaml.YAMLError as err:
        raise InventoryError(f'Unable to parse {description} file {path}: {err}') from err


def default_port(method):
    """Gets the configured port for the given access method."""
    return get_config_value('hmc.ssh_port' if method == CLI_SOURCE else 'hmc.port')


def _find_group_hosts(node, group):
    """Finds the hosts of a group anywhere in an Ansible YAML inventory.

    Returns:
        dict: host names mapped to their variables, or None if the group
            is not found.
    """
    if not isinstance(node, dict):
        return None
    for name, value in node.items():
        if not isinstance(value, dict):
            continue
        if name == group:
            return value.get('hosts') or {}
        found = _find_group_hosts(value.get('children'), group)
        if found is not None:
            return found
    return None


def boolean_attribute(name, value):
    """Converts an inventory attribute to a bool the way Ansible does.

    Raises:
        ValueError: if the value is neither a bool nor a recognized string.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, str)):
        text = str(value).strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise ValueError(f"'{name}' must be a boolean, not {value!r}")


def _target(identifier, attributes, method):
    attributes = attributes or {}
    if not isinstance(attributes, dict):
        raise InventoryError(f"Attributes of HMC '{identifier}' must be a mapping")
    try:
        return HMCTarget(
            identifier=str(identifier),
            host=str(attributes.get('host') or attributes.get('ansible_host') or identifier),
            port=int(attributes.get('port') or attributes.get('hmc_port') or default_port(method)),
            validate_certs=boolean_attribute('validate_certs', attributes.get(
                'validate_certs', get_config_value('hmc.cert_verify'))),
            timeout=int(attributes.get('timeout') or get_config_value('hmc.timeout')),
        )
    except (TypeError, ValueError) as err:
        raise InventoryError(f"Invalid attributes of HMC '{identifier}': {err}") from err


def load_hmcs(path, method, group=None):
    """Loads the HMCs to collect from.

    The file is either a mapping with an 'hmcs' key, whose value maps HMC
    identifiers to their connection attributes, or an Ansible YAML inventory
    in which the hosts of `group` are the HMCs.

    Args:
        path (str): the path to the inventory file.
        method (str): the access method, used for the default port.
        group (str): the inventory group of the HMCs. Defaults to the
            'inventory.group' configuration option.

    Returns:
        list of HMCTarget: the HMCs in the order they are listed.

    Raises:
        InventoryError: if the file cannot be read or lists no HMCs.
    """
    group = group or get_config_value('inventory.group')
    contents = _load_yaml(path, 'inventory')
    if not isinstance(contents, dict):
        raise InventoryError(f'Inventory file {path} must contain a mapping')

    if 'hmcs' in contents:
        hosts = contents['hmcs'] or {}
    else:
        hosts = _find_group_hosts(contents, group)
        if hosts is None:
            raise InventoryError(f"Inventory file {path} has neither an 'hmcs' "
                                 f"mapping nor a '{group}' group")

    if not isinstance(hosts, dict):
        raise InventoryError(f'HMCs in inventory file {path} must be a mapping')
    if not hosts:
        raise InventoryError(f'Inventory file {path} lists no HMCs')

    targets = [_target(identifier, attributes, method)
               for identifier, attributes in hosts.items()]
    LOGGER.debug('Loaded %s HMCs from %s', len(targets), path)
    return targets


def load_credentials(path):
    """Loads HMC credentials.

    The file maps HMC identifiers, and optionally 'default', to mappings
    with 'username' and 'password' keys.

    Returns:
        dict: identifiers mapped to Credentials.

    Raises:
        InventoryError: if the file cannot be read or is malformed.
    """
    contents = _load_yaml(path, 'credentials')
    if not isinstance(contents, dict):
        raise InventoryError(f'Credentials file {path} must contain a mapping')

    credentials = {}
    for identifier, entry in contents.items():
        if not isinstance(entry, dict) or 'username' not in entry or 'password' not in entry:
            raise InventoryError(f"Credentials of '{identifier}' in {path} must have "
                                 f"'username' and 'password'")
        credentials[str(identifier)] = Credentials(str(entry['username']), str(entry['password']))
    return credentials


def get_credentials(credentials, identifier):
    """Gets the credentials of an HMC, falling back on the default credentials.

    Raises:
        InventoryError: if there are no credentials for the HMC.
    """
    for key in (identifier, DEFAULT_CREDENTIALS_KEY):
        if key in credentials:
            return credentials[key]
    raise InventoryError(f"No credentials for HMC '{identifier}'")
