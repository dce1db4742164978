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
Unit tests for powerinv.cli.collect.main
"""
from argparse import Namespace
import unittest
from unittest import mock

from powerinv.cli.collect.main import do_collect, get_targets
from powerinv.collector import HMCRunResult
from powerinv.inventory import Credentials, HMCTarget, InventoryError
from tests.common import ExtendedTestCase

TARGETS = [
    HMCTarget('hmc01', 'hmc01.example.com', 12443, True, 60),
    HMCTarget('hmc02', 'hmc02.example.com', 12443, True, 60),
]


def delivered_result(identifier, delivered=True):
    result = mock.Mock(spec=HMCRunResult)
    result.identifier = identifier
    result.delivered = delivered
    return result


class TestGetTargets(unittest.TestCase):
    """Tests for get_targets."""

    def setUp(self):
        mock.patch('powerinv.cli.collect.main.get_config_value',
                   return_value='inventory/hmcs.yml').start()
        self.mock_load_hmcs = mock.patch('powerinv.cli.collect.main.load_hmcs',
                                         return_value=TARGETS).start()

    def tearDown(self):
        mock.patch.stopall()

    def test_all_targets(self):
        """Test all HMCs in the inventory are targets without --hmc."""
        self.assertEqual(get_targets(Namespace(hmc_ids=None), 'rest'), TARGETS)
        self.mock_load_hmcs.assert_called_once_with('inventory/hmcs.yml', 'rest')

    def test_selected_targets(self):
        """Test --hmc limits the targets."""
        self.assertEqual(get_targets(Namespace(hmc_ids=['hmc02']), 'rest'), TARGETS[1:])

    def test_unknown_target(self):
        """Test an --hmc that is not in the inventory is an error."""
        with self.assertRaisesRegex(InventoryError, 'HMCs not in the inventory: hmc03, hmc04'):
            get_targets(Namespace(hmc_ids=['hmc01', 'hmc03', 'hmc04']), 'rest')


class TestDoCollect(ExtendedTestCase):
    """Tests for do_collect."""

    def setUp(self):
        self.config_values = {
            'hmc.method': 'rest',
            'collection.systems': True,
            'collection.lpars': True,
            'collection.adapters': False,
            'collection.max_workers': 4,
            'collection.auth_retries': 1,
            'output.formats': 'json, csv,json',
            'output.destinations': 'local',
            'inventory.credentials_file': 'vars/credentials.yml',
        }
        mock.patch('powerinv.cli.collect.main.get_config_value',
                   side_effect=lambda option: self.config_values[option]).start()
        self.mock_get_targets = mock.patch('powerinv.cli.collect.main.get_targets',
                                           return_value=TARGETS).start()
        self.credentials = {'default': Credentials('hscroot', 'abc123')}
        self.mock_load_credentials = mock.patch('powerinv.cli.collect.main.load_credentials',
                                                return_value=self.credentials).start()
        self.mock_warnings = mock.patch(
            'powerinv.cli.collect.main.configure_insecure_request_warnings').start()
        self.mock_dispatcher_cls = mock.patch('powerinv.cli.collect.main.Dispatcher').start()
        self.mock_run_collection = mock.patch(
            'powerinv.cli.collect.main.run_collection',
            return_value=[delivered_result('hmc01'), delivered_result('hmc02', False)]
        ).start()
        self.mock_table = mock.patch('powerinv.cli.collect.main.get_run_summary_table').start()
        self.mock_log_summary = mock.patch('powerinv.cli.collect.main.log_run_summary').start()
        self.mock_print = mock.patch('powerinv.cli.collect.main.print').start()
        self.args = Namespace(hmc_ids=None)

    def tearDown(self):
        mock.patch.stopall()

    def test_collect(self):
        """Test a collection run with the configured options."""
        do_collect(self.args)

        self.mock_get_targets.assert_called_once_with(self.args, 'rest')
        self.mock_load_credentials.assert_called_once_with('vars/credentials.yml')
        self.mock_warnings.assert_called_once_with(['hmc01.example.com', 'hmc02.example.com'])
        self.mock_dispatcher_cls.assert_called_once_with(['local'])
        self.mock_run_collection.assert_called_once_with(
            TARGETS, self.credentials, 'rest', ['systems', 'lpars'], ['json', 'csv'],
            self.mock_dispatcher_cls.return_value, max_workers=4, attempts=2
        )
        self.mock_print.assert_called_once_with(self.mock_table.return_value)
        self.mock_log_summary.assert_called_once_with(self.mock_run_collection.return_value)

    def test_nothing_delivered(self):
        """Test the exit status is 1 when no HMC's report was delivered."""
        self.mock_run_collection.return_value = [delivered_result('hmc01', False)]
        with self.assertLogs(level='ERROR') as logs:
            with self.assertRaises(SystemExit) as cm:
                do_collect(self.args)
        self.assertEqual(cm.exception.code, 1)
        self.assert_in_element('No HMC produced a delivered report.', logs.output)

    def test_all_kinds_disabled(self):
        """Test collecting nothing is an error."""
        self.config_values.update({'collection.systems': False, 'collection.lpars': False})
        with self.assertLogs(level='ERROR'):
            with self.assertRaises(SystemExit):
                do_collect(self.args)
        self.mock_run_collection.assert_not_called()

    def test_no_destinations(self):
        """Test an empty destination list is an error."""
        self.config_values['output.destinations'] = ' , '
        with self.assertLogs(level='ERROR'):
            with self.assertRaises(SystemExit):
                do_collect(self.args)
        self.mock_run_collection.assert_not_called()

    def test_inventory_error(self):
        """Test an inventory that cannot be loaded is an error."""
        self.mock_get_targets.side_effect = InventoryError('Unable to read inventory file')
        with self.assertLogs(level='ERROR') as logs:
            with self.assertRaises(SystemExit) as cm:
                do_collect(self.args)
        self.assertEqual(cm.exception.code, 1)
        self.assert_in_element('Unable to read inventory file', logs.output)
        self.mock_run_collection.assert_not_called()


if __name__ == '__main__':
    unittest.main()
