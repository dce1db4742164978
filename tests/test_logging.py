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
Unit tests for powerinv.logging
"""
import logging
import unittest
from unittest import mock

from powerinv.logging import bootstrap_logging, configure_logging

LOG_FILE = '/var/log/powerinv/powerinv.log'


def get_handlers(logger):
    """Get the stream handler and the file handler of a logger.

    FileHandler is a subclass of StreamHandler, so it is checked first.
    """
    stream_handlers = []
    file_handlers = []
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            file_handlers.append(handler)
        elif isinstance(handler, logging.StreamHandler):
            stream_handlers.append(handler)
    return stream_handlers, file_handlers


class TestLogging(unittest.TestCase):
    """Tests for bootstrap_logging and configure_logging."""

    def setUp(self):
        # getLogger is called for powerinv, then paramiko, then py.warnings.
        self.logger = logging.getLogger(f'{__name__}.powerinv')
        self.ssh_logger = logging.getLogger(f'{__name__}.paramiko')
        self.warnings_logger = logging.getLogger(f'{__name__}.py.warnings')
        self.mock_get_logger = mock.patch(
            'powerinv.logging.logging.getLogger',
            side_effect=[self.logger, self.ssh_logger, self.warnings_logger]
        ).start()

        self.config_values = {
            'logging.file_name': LOG_FILE,
            'logging.file_level': 'debug',
            'logging.stderr_level': 'warning'
        }
        mock.patch('powerinv.logging.get_config_value',
                   side_effect=lambda option: self.config_values[option]).start()
        self.mock_makedirs = mock.patch('powerinv.logging.os.makedirs').start()

    def tearDown(self):
        mock.patch.stopall()
        for logger in (self.logger, self.ssh_logger, self.warnings_logger):
            logger.handlers = []

    def test_bootstrap_logging(self):
        """Test warnings go to stderr before the configuration is loaded."""
        bootstrap_logging()

        self.mock_get_logger.assert_called_once_with('powerinv')
        self.assertEqual(self.logger.level, logging.DEBUG)
        stream_handlers, file_handlers = get_handlers(self.logger)
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(file_handlers, [])
        self.assertEqual(stream_handlers[0].level, logging.WARNING)

        with self.assertLogs(self.logger, logging.WARNING) as cm:
            self.logger.warning('HMC hmc01 is slow')
        self.assertEqual(stream_handlers[0].format(cm.records[0]), 'WARNING: HMC hmc01 is slow')

    @mock.patch('logging.open', mock.MagicMock)
    def test_configure_logging(self):
        """Test stderr and file handlers are shared by the configured loggers."""
        configure_logging()

        self.assertEqual([c[0][0] for c in self.mock_get_logger.call_args_list],
                         ['powerinv', 'paramiko', 'py.warnings'])
        self.mock_makedirs.assert_called_once_with('/var/log/powerinv', exist_ok=True)

        stream_handlers, file_handlers = get_handlers(self.logger)
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(len(file_handlers), 1)
        stream_handler, file_handler = stream_handlers[0], file_handlers[0]
        self.assertEqual(stream_handler.level, logging.WARNING)
        self.assertEqual(file_handler.level, logging.DEBUG)
        self.assertEqual(file_handler.baseFilename, LOG_FILE)

        for logger in (self.ssh_logger, self.warnings_logger):
            self.assertEqual(logger.level, logging.WARNING)
            self.assertEqual(get_handlers(logger)[1], [file_handler])

        with self.assertLogs(self.logger, logging.WARNING) as cm:
            self.logger.warning('HMC hmc01 is slow')
        self.assertEqual(stream_handler.format(cm.records[0]), 'WARNING: HMC hmc01 is slow')
        self.assertIn(f' - WARNING - MainThread - {self.logger.name} - HMC hmc01 is slow',
                      file_handler.format(cm.records[0]))

    def test_configure_logging_replaces_bootstrap_handler(self):
        """Test the bootstrap handler is removed when logging is configured."""
        bootstrap_handler = logging.StreamHandler()
        self.logger.addHandler(bootstrap_handler)
        with mock.patch('powerinv.logging.logging.FileHandler'):
            configure_logging()
        self.assertNotIn(bootstrap_handler, self.logger.handlers)

    def test_configure_logging_directory_fail(self):
        """Test logging goes to stderr only if the log directory can't be created."""
        self.mock_makedirs.side_effect = OSError('Permission denied')
        configure_logging()

        for logger in (self.logger, self.ssh_logger, self.warnings_logger):
            stream_handlers, file_handlers = get_handlers(logger)
            self.assertEqual(len(stream_handlers), 1)
            self.assertEqual(file_handlers, [])

    @mock.patch('powerinv.logging.logging.FileHandler', side_effect=PermissionError('denied'))
    def test_configure_logging_file_fail(self, _):
        """Test logging goes to stderr only if the log file can't be opened."""
        configure_logging()
        self.assertEqual(len(self.logger.handlers), 1)

    @mock.patch('powerinv.logging.logging.FileHandler')
    def test_configure_logging_no_directory(self, _):
        """Test no directory is created for a log file in the working directory."""
        self.config_values['logging.file_name'] = 'powerinv.log'
        configure_logging()
        self.mock_makedirs.assert_not_called()


if __name__ == '__main__':
    unittest.main()
