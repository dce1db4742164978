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
Unit tests for powerinv.persistence.aap
"""
import json
import os
import tempfile
import unittest

from powerinv.persistence.aap import AAPDestination, ARTIFACT_INDEX_FILE_NAME, ARTIFACT_INDEX_KEY
from powerinv.persistence.base import PersistenceError

IDENTIFIER = 'power_infrastructure_hmc01_2026-10-18_12-00-00'


class TestAAPDestination(unittest.TestCase):
    """Tests for AAPDestination."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.artifact_dir = os.path.join(self.tmp_dir.name, 'artifacts')
        self.destination = AAPDestination(self.artifact_dir, max_artifact_bytes=64)
        self.index_path = os.path.join(self.artifact_dir, ARTIFACT_INDEX_FILE_NAME)

    def tearDown(self):
        self.tmp_dir.cleanup()

    def read_index(self):
        with open(self.index_path) as f:
            return json.load(f)

    def test_store(self):
        """Test a report is written and registered in the artifact index."""
        path = self.destination.store(IDENTIFIER, 'yaml', b'hmc_identifier: hmc01\n')
        self.assertEqual(path, os.path.join(self.artifact_dir, f'{IDENTIFIER}.yml'))
        self.assertTrue(os.path.isfile(path))
        self.assertEqual(self.read_index(), {
            ARTIFACT_INDEX_KEY: {f'{IDENTIFIER}.yml': 'hmc_identifier: hmc01\n'}
        })

    def test_index_merges(self):
        """Test reports stored one after another are all in the index."""
        self.destination.store(IDENTIFIER, 'json', b'{}')
        self.destination.store('power_infrastructure_hmc02_2026-10-18_12-00-00', 'csv', b'name\n')
        self.assertEqual(len(self.read_index()[ARTIFACT_INDEX_KEY]), 2)

    def test_existing_index_kept(self):
        """Test other keys of an existing index are kept."""
        os.makedirs(self.artifact_dir)
        with open(self.index_path, 'w') as f:
            json.dump({'other': 1}, f)
        self.destination.store(IDENTIFIER, 'json', b'{}')
        index = self.read_index()
        self.assertEqual(index['other'], 1)
        self.assertIn(f'{IDENTIFIER}.json', index[ARTIFACT_INDEX_KEY])

    def test_malformed_index(self):
        """Test an index that is not JSON raises PersistenceError."""
        os.makedirs(self.artifact_dir)
        with open(self.index_path, 'w') as f:
            f.write('{not json')
        with self.assertRaisesRegex(PersistenceError, 'Unable to read artifact index'):
            self.destination.store(IDENTIFIER, 'json', b'{}')

    def test_too_large(self):
        """Test a report over the size limit is rejected before anything is written."""
        with self.assertRaisesRegex(PersistenceError, 'more than the artifact limit of 64 bytes'):
            self.destination.store(IDENTIFIER, 'html', b'x' * 65)
        self.assertFalse(os.path.exists(self.artifact_dir))

    def test_not_utf8(self):
        """Test a report that is not UTF-8 is rejected."""
        with self.assertRaisesRegex(PersistenceError, 'not valid UTF-8'):
            self.destination.store(IDENTIFIER, 'csv', b'\xff\xfe')


if __name__ == '__main__':
    unittest.main()
