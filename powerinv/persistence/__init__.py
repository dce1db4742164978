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
Destinations that rendered reports are persisted to.
"""
import logging

from powerinv.persistence.aap import AAPDestination
from powerinv.persistence.base import Destination, PersistenceError, report_file_name
from powerinv.persistence.git import GitDestination
from powerinv.persistence.local import LocalDestination
from powerinv.persistence.s3 import S3Destination

LOGGER = logging.getLogger(__name__)

DESTINATION_CLASSES = {
    cls.name: cls for cls in (LocalDestination, AAPDestination, S3Destination, GitDestination)
}


def get_destination(name):
    """Creates the destination with the given name.

    Raises:
        PersistenceError: if the name is unknown or the destination cannot be
            created from its configuration.
    """
    try:
        destination_class = DESTINATION_CLASSES[name]
    except KeyError:
        raise PersistenceError(f"Unknown destination '{name}'; valid destinations are: "
                               f"{', '.join(DESTINATION_CLASSES)}")
    return destination_class()


class Dispatcher:
    """Stores rendered reports to several destinations.

    A failure of one destination does not prevent storing to the others.
    """

    def __init__(self, destination_names):
        """Create a new Dispatcher.

        Destinations that cannot be created are remembered as failed, so
        that every report stored is reported as failing for them.

        Args:
            destination_names (Iterable of str): the names of the destinations.
        """
        self.destinations = []
        self.setup_failures = {}
        for name in destination_names:
            try:
                self.destinations.append(get_destination(name))
            except PersistenceError as err:
                LOGGER.error("Unable to set up destination '%s': %s", name, err)
                self.setup_failures[name] = err

    @property
    def names(self):
        return [d.name for d in self.destinations] + list(self.setup_failures)

    def store(self, identifier, rendered):
        """Stores the rendered formats of one report to every destination.

        Args:
            identifier (str): the report identifier.
            rendered (dict): formats mapped to rendered bytes.

        Returns:
            dict: destination names mapped to a list of (format, error)
                tuples, one per format that could not be stored. An empty
                list means every format was stored.
        """
        results = {name: [(fmt, str(err)) for fmt in rendered]
                   for name, err in self.setup_failures.items()}
        for destination in self.destinations:
            failures = []
            for fmt, data in rendered.items():
                try:
                    destination.store(identifier, fmt, data)
                except PersistenceError as err:
                    LOGGER.error("Unable to store %s report %s to destination '%s': %s",
                                 fmt, identifier, destination, err)
                    failures.append((fmt, str(err)))
            results[destination.name] = failures
        return results

    def finalize(self):
        """Finalizes every destination.

        Returns:
            dict: names of destinations that failed to finalize mapped to
                their errors.
        """
        failures = {}
        for destination in self.destinations:
            try:
                destination.finalize()
            except PersistenceError as err:
                LOGGER.error("Unable to finalize destination '%s': %s", destination, err)
                failures[destination.name] = err
        return failures


__all__ = [
    'AAPDestination', 'Destination', 'Dispatcher', 'GitDestination', 'LocalDestination',
    'PersistenceError', 'S3Destination', 'get_destination', 'report_file_name',
]
