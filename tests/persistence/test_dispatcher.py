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
Unit tests for powerinv.persistence.Dispatcher and get_destination
"""
import unittest
from unittest import mock

from powerinv.persistence import Dispatcher, PersistenceError, get_destination


def fake_destination_class(name, store_error=None, finalize_error=None, init_error=None):
    """Creates a mock destination class whose instances fail as requested."""
    destination = mock.Mock()
    destination.name = name
    destination.__str__ = mock.Mock(return_value=name)
    if store_error:
        destination.store.side_effect = store_error
    if finalize_error:
        destination.finalize.side_effect = finalize_error
    destination_class = mock.Mock(return_value=destination)
    if init_error:
        destination_class.side_effect = init_error
    return destination_class


class TestGetDestination(unittest.TestCase):
    """Tests for get_destination."""

    def test_unknown_destination(self):
        """Test an unknown destination name raises PersistenceError."""
        with self.assertRaisesRegex(PersistenceError, "Unknown destination 'ftp'"):
            get_destination('ftp')

    @mock.patch('powerinv.persistence.local.get_config_value', return_value='output/reports')
    def test_local_destination(self, _):
        """Test creating the local destination."""
        destination = get_destination('local')
        self.assertEqual(destination.name, 'local')
        self.assertEqual(str(destination), 'local')


class TestDispatcher(unittest.TestCase):
    """Tests for the Dispatcher class."""

    def setUp(self):
        self.classes = {
            'local': fake_destination_class('local'),
            's3': fake_destination_class('s3', store_error=PersistenceError('upload failed')),
            'git': fake_destination_class('git', finalize_error=PersistenceError('push rejected')),
            'aap': fake_destination_class('aap', init_error=PersistenceError('not configured')),
        }
        mock.patch.dict('powerinv.persistence.DESTINATION_CLASSES', self.classes).start()
        self.rendered = {'json': b'{}', 'csv': b''}

    def tearDown(self):
        mock.patch.stopall()

    def test_setup_failure(self):
        """Test a destination that cannot be created is remembered as failed."""
        with self.assertLogs('powerinv.persistence', level='ERROR'):
            dispatcher = Dispatcher(['local', 'aap'])
        self.assertEqual(dispatcher.names, ['local', 'aap'])
        self.assertEqual(list(dispatcher.setup_failures), ['aap'])

    def test_store(self):
        """Test each format is stored to every destination and failures are isolated."""
        with self.assertLogs('powerinv.persistence', level='ERROR'):
            dispatcher = Dispatcher(['local', 's3', 'aap'])
            results = dispatcher.store('report-id', self.rendered)

        self.assertEqual(results['local'], [])
        self.assertEqual(results['s3'], [('json', 'upload failed'), ('csv', 'upload failed')])
        self.assertEqual(results['aap'], [('json', 'not configured'), ('csv', 'not configured')])

        local = self.classes['local'].return_value
        local.store.assert_has_calls([
            mock.call('report-id', 'json', b'{}'),
            mock.call('report-id', 'csv', b''),
        ])

    def test_finalize(self):
        """Test every destination is finalized and failures are returned."""
        dispatcher = Dispatcher(['local', 'git'])
        with self.assertLogs('powerinv.persistence', level='ERROR'):
            failures = dispatcher.finalize()
        self.assertEqual(list(failures), ['git'])
        self.assertIn('push rejected', str(failures['git']))
        self.classes['local'].return_value.finalize.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
