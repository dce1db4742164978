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
Base class of destinations that rendered reports are persisted to.
"""
import logging

from powerinv.constants import FORMAT_EXTENSIONS

LOGGER = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A rendered report could not be persisted to a destination."""
    pass


def report_file_name(identifier, fmt):
    """Gets the file name of a rendered report.

    Args:
        identifier (str): the report identifier, e.g.
            'power_infrastructure_hmc01_2026-10-18_12-00-00'.
        fmt (str): the report format.

    Returns:
        str: the file name, e.g. 'power_infrastructure_hmc01_2026-10-18_12-00-00.yml'.
    """
    return f'{identifier}.{FORMAT_EXTENSIONS[fmt]}'


class Destination:
    """A place rendered reports are persisted to.

    Subclasses implement `store`, and `finalize` if they defer work until all
    reports have been stored. Implementations must be safe to call from
    multiple threads.
    """

    # The name of the destination used in configuration and on the command line
    name = ''

    def store(self, identifier, fmt, data):
        """Stores one rendered report.

        Args:
            identifier (str): the report identifier.
            fmt (str): the report format.
            data (bytes): the rendered report.

        Returns:
            str: where the report was stored.

        Raises:
            PersistenceError: if the report could not be stored.
        """
        raise NotImplementedError

    def finalize(self):
        """Completes any work deferred by `store`.

        Raises:
            PersistenceError: if the deferred work fails.
        """
        pass

    def __str__(self):
        return self.name
