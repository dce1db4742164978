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
Helpers shared across powerinv: table output, JSON and YAML dumpers, the S3
resource and stage logging.
"""
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal
from functools import partial
from json import dumps
from json.encoder import JSONEncoder
import logging
import os
import time

# Get the most efficient YAML dumper available
try:
    from yaml import CSafeDumper as SafeDumper
except ImportError:
    from yaml import SafeDumper
from yaml import dump
from yaml.resolver import BaseResolver
import boto3
from prettytable import PrettyTable

from powerinv.config import get_config_value, read_config_value_file

LOGGER = logging.getLogger(__name__)


def get_pretty_table(rows, headings=None):
    """Build a borderless, left-aligned PrettyTable.

    Args:
        rows (list of list): the rows of the table.
        headings (list of str): the column headings. When omitted the table
            has no heading row.

    Returns:
        A PrettyTable holding the rows.
    """
    table = PrettyTable()
    table.border = False
    table.left_padding_width = 1

    if headings:
        table.field_names = headings
    else:
        table.header = False
        # Alignment is keyed by field name, so a headingless table still needs names.
        if rows and rows[0]:
            table.field_names = [str(index) for index in range(len(rows[0]))]

    for field_name in table.align:
        table.align[field_name] = 'l'

    for row in rows:
        table.add_row(row)

    return table


YAML_FORMAT_PARAMS = {'width': 80, 'indent': 4, 'default_flow_style': False,
                      'sort_keys': False, 'allow_unicode': True}


class PowerInvDumper(SafeDumper):
    """A safe YAML dumper for report data.

    Ordered mappings keep their order, tuples become lists, and Decimal
    processor units become plain numbers. Repeated objects are written out
    in full rather than as anchors and aliases.
    """
    def ignore_aliases(self, *args, **kwargs):
        return True


def _represent_ordered_dict(dumper, data):
    return dumper.represent_mapping(BaseResolver.DEFAULT_MAPPING_TAG, data.items())


def _represent_decimal(dumper, value):
    return dumper.represent_float(float(value))


def _represent_tuple(dumper, data):
    return dumper.represent_list(list(data))


PowerInvDumper.add_representer(OrderedDict, _represent_ordered_dict)
PowerInvDumper.add_representer(Decimal, _represent_decimal)
PowerInvDumper.add_representer(tuple, _represent_tuple)

yaml_dump = partial(dump, Dumper=PowerInvDumper, **YAML_FORMAT_PARAMS)

JSON_FORMAT_PARAMS = {'indent': 4}


class PowerInvEncoder(JSONEncoder):
    """A JSONEncoder that writes Decimal values as numbers."""
    def default(self, o):
        if isinstance(o, Decimal):
            return float(o)
        return super().default(o)


json_dump = partial(dumps, cls=PowerInvEncoder, **JSON_FORMAT_PARAMS)


class S3ResourceCreationError(Exception):
    """The S3 resource could not be created from the configuration."""
    pass


def get_s3_resource():
    """Create a boto3 S3 resource from the s3 section of the configuration.

    Access and secret keys are read from the files named by
    s3.access_key_file and s3.secret_key_file. When either is unset, boto3
    resolves credentials through its usual chain of sources.

    Returns:
        A boto3 S3 ServiceResource.

    Raises:
        S3ResourceCreationError: if a key file cannot be read or boto3
            rejects the configured values.
    """
    try:
        access_key = read_config_value_file('s3.access_key_file')
        secret_key = read_config_value_file('s3.secret_key_file')
    except OSError as err:
        raise S3ResourceCreationError(f'Unable to read S3 key file: {err}') from err

    resource_kwargs = {
        'endpoint_url': get_config_value('s3.endpoint') or None,
        'region_name': get_config_value('s3.region') or None,
        'verify': get_config_value('s3.cert_verify'),
    }
    if access_key and secret_key:
        resource_kwargs['aws_access_key_id'] = access_key
        resource_kwargs['aws_secret_access_key'] = secret_key

    try:
        return boto3.resource('s3', **resource_kwargs)
    except ValueError as err:
        # boto3 raises ValueError for values such as a malformed endpoint URL.
        raise S3ResourceCreationError(f'Unable to create S3 resource: {err}') from err


class BeginEndLogger:
    """Logs 'BEGIN: <msg>' on entry and 'END: <msg>' with the elapsed time on exit."""

    def __init__(self, msg, logger=None, level=logging.DEBUG):
        """Create a new BeginEndLogger.

        Args:
            msg (str): the stage being timed.
            logger (logging.Logger): the logger to use. Defaults to the logger
                of this module.
            level (int): the level of both messages.
        """
        self.msg = msg
        self.logger = logger or LOGGER
        self.level = level
        self.start_time = None

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.log(self.level, 'BEGIN: %s', self.msg)
        return self

    def __exit__(self, type_, value, traceback):
        duration = timedelta(seconds=time.monotonic() - self.start_time)
        self.logger.log(self.level, 'END: %s. Duration: %s', self.msg, duration)


def ensure_permissions(path, file_mode=0o600, dir_mode=0o700):
    """Restrict the permissions of a file, or of a directory, and its parent.

    A file gets `file_mode` and its parent directory gets `dir_mode`. A
    directory gets `dir_mode` and its parent is left alone. Paths that do
    not exist are skipped.

    Args:
        path (str): the file or directory.
        file_mode (int): the mode for a file.
        dir_mode (int): the mode for directories.

    Returns:
        None.
    """
    if os.path.isdir(path):
        os.chmod(path, dir_mode)
        return
    if os.path.isfile(path):
        os.chmod(path, file_mode)

    parent = os.path.dirname(path)
    if os.path.isdir(parent):
        os.chmod(parent, dir_mode)
