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
Persistence of rendered reports to a local directory.
"""
import logging
import os

from powerinv.config import get_config_value
from powerinv.persistence.base import Destination, PersistenceError, report_file_name

LOGGER = logging.getLogger(__name__)


def write_report_file(directory, file_name, data):
    """Writes a rendered report to a file in a directory, creating the directory.

    Returns:
        str: the path of the file written.

    Raises:
        PersistenceError: if the file cannot be written.
    """
    path = os.path.join(directory, file_name)
    try:
        os.makedirs(directory, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as err:
        raise PersistenceError(f'Unable to write {path}: {err}') from err
    return path


class LocalDestination(Destination):
    """Writes reports to the output directory."""

    name = 'local'

    def __init__(self, directory=None):
        self.directory = directory or get_config_value('output.directory')

    def store(self, identifier, fmt, data):
        path = write_report_file(self.directory, report_file_name(identifier, fmt), data)
        LOGGER.info('Wrote %s report to %s', fmt, path)
        return path
