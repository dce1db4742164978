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
Unit tests for powerinv.hmc.rest
"""
import unittest
from unittest import mock

import requests

from powerinv.constants import ADAPTERS, LPARS, SYSTEMS
from powerinv.hmc.errors import AuthError, HMCRequestError
from powerinv.hmc.rest import HMCRestSession, SESSION_HEADER

LOGON_RESPONSE = """\
<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<LogonResponse xmlns="http://www.ibm.com/xmlns/systems/power/firmware/web/mc/2012_10/" \
schemaVersion="V1_0">
    <Metadata><Atom/></Metadata>
    <X-API-Session kb="ROR" kxe="false">abc123token</X-API-Session>
</LogonResponse>
"""


def make_response(status_code=200, text='', reason='OK'):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    response.reason = reason
    return response


class TestHMCRestSession(unittest.TestCase):
    """Tests for the HMCRestSession class."""

    def setUp(self):
        self.mock_session_cls = mock.patch('powerinv.hmc.rest.requests.Session').start()
        self.mock_session = self.mock_session_cls.return_value
        self.mock_session.headers = {}
        self.mock_session.post.return_value = make_response(200, LOGON_RESPONSE)
        self.mock_session.delete.return_value = make_response(204)
        self.hmc = HMCRestSession('hmc01.example.com', 12443, 'hscroot', 'p<ss&word',
                                  validate_certs=False, timeout=30)

    def tearDown(self):
        mock.patch.stopall()

    def assert_auth_error(self, reason):
        """Asserts logon raises an AuthError with the given reason and closes the session."""
        with self.assertRaises(AuthError) as cm:
            self.hmc.logon()
        self.assertEqual(cm.exception.reason, reason)
        self.assertEqual(cm.exception.host, 'hmc01.example.com')
        self.assertFalse(self.hmc.authenticated)
        self.mock_session.close.assert_called_once_with()
        return cm.exception

    def test_logon(self):
        """Test a successful logon stores the session token."""
        self.hmc.logon()

        self.assertTrue(self.hmc.authenticated)
        self.assertEqual(self.hmc.token, 'abc123token')
        self.assertEqual(self.mock_session.headers[SESSION_HEADER], 'abc123token')
        self.assertFalse(self.mock_session.verify)

        args, kwargs = self.mock_session.post.call_args
        self.assertEqual(args[0], 'https://hmc01.example.com:12443/rest/api/web/Logon')
        self.assertEqual(kwargs['timeout'], 30)
        self.assertIn('type=LogonRequest', kwargs['headers']['Content-Type'])
        self.assertIn('<UserID kb="CUR" kxe="false">hscroot</UserID>', kwargs['data'])
        self.assertIn('<Password kb="CUR" kxe="false">p&lt;ss&amp;word</Password>',
                      kwargs['data'])

    def test_logon_rejected(self):
        """Test a 401 response is an invalid_credentials failure."""
        self.mock_session.post.return_value = make_response(401, reason='Unauthorized')
        self.assert_auth_error('invalid_credentials')

    def test_logon_server_error(self):
        """Test another failed status is a network_unreachable failure."""
        self.mock_session.post.return_value = make_response(503, reason='Service Unavailable')
        err = self.assert_auth_error('network_unreachable')
        self.assertIn('503', str(err))

    def test_logon_no_token(self):
        """Test a response without a token is an invalid_credentials failure."""
        self.mock_session.post.return_value = make_response(200, '<LogonResponse/>')
        self.assert_auth_error('invalid_credentials')

    def test_logon_unparseable_response(self):
        """Test a response that is not XML is an invalid_credentials failure."""
        self.mock_session.post.return_value = make_response(200, 'not xml')
        self.assert_auth_error('invalid_credentials')

    def test_logon_tls_failure(self):
        """Test a certificate failure is a tls_validation_failed failure."""
        self.mock_session.post.side_effect = requests.exceptions.SSLError('bad certificate')
        self.assert_auth_error('tls_validation_failed')

    def test_logon_timeout(self):
        """Test a timeout is a timeout failure."""
        self.mock_session.post.side_effect = requests.exceptions.ConnectTimeout('timed out')
        self.assert_auth_error('timeout')

    def test_logon_connection_error(self):
        """Test a connection failure is a network_unreachable failure."""
        self.mock_session.post.side_effect = requests.exceptions.ConnectionError('refused')
        self.assert_auth_error('network_unreachable')

    def test_get(self):
        """Test getting the feed of each resource kind."""
        self.hmc.logon()
        self.mock_session.get.return_value = make_response(200, '<feed/>')
        for kind, path, media_type in ((SYSTEMS, 'ManagedSystem', 'ManagedSystem'),
                                       (LPARS, 'LogicalPartition', 'LogicalPartition'),
                                       (ADAPTERS, 'IOAdapter', 'IOAdapter')):
            self.assertEqual(self.hmc.get(kind), '<feed/>')
            args, kwargs = self.mock_session.get.call_args
            self.assertEqual(args[0], f'https://hmc01.example.com:12443/rest/api/uom/{path}')
            self.assertIn(f'type={media_type}', kwargs['headers']['Accept'])

    def test_get_no_content(self):
        """Test a 204 response is an empty feed."""
        self.hmc.logon()
        self.mock_session.get.return_value = make_response(204)
        self.assertEqual(self.hmc.get(LPARS), '')

    def test_get_failed_status(self):
        """Test a failed status raises HMCRequestError."""
        self.hmc.logon()
        self.mock_session.get.return_value = make_response(500, reason='Internal Server Error')
        with self.assertRaisesRegex(HMCRequestError, 'status code 500'):
            self.hmc.get(SYSTEMS)

    def test_get_request_exception(self):
        """Test a failed request raises HMCRequestError."""
        self.hmc.logon()
        self.mock_session.get.side_effect = requests.exceptions.ReadTimeout('read timed out')
        with self.assertRaisesRegex(HMCRequestError, 'read timed out'):
            self.hmc.get(SYSTEMS)

    def test_get_not_logged_on(self):
        """Test getting a feed before logging on raises HMCRequestError."""
        with self.assertRaises(HMCRequestError):
            self.hmc.get(SYSTEMS)

    def test_logoff(self):
        """Test logging off deletes the session."""
        self.hmc.logon()
        self.hmc.logoff()
        self.mock_session.delete.assert_called_once_with(
            'https://hmc01.example.com:12443/rest/api/web/Logon', timeout=30
        )
        self.mock_session.close.assert_called_once_with()
        self.assertFalse(self.hmc.authenticated)

    def test_logoff_failure_not_raised(self):
        """Test a failure to log off is logged and not raised."""
        self.hmc.logon()
        self.mock_session.delete.side_effect = requests.exceptions.ConnectionError('reset')
        with self.assertLogs('powerinv.hmc.rest', level='WARNING') as cm:
            self.hmc.logoff()
        self.assertIn('Unable to log off from HMC hmc01.example.com', cm.output[0])
        self.mock_session.close.assert_called_once_with()

    def test_context_manager(self):
        """Test the session logs off when the block raises."""
        with self.assertRaises(HMCRequestError):
            with self.hmc as hmc:
                self.assertTrue(hmc.authenticated)
                raise HMCRequestError('failed')
        self.mock_session.delete.assert_called_once()
        self.assertFalse(self.hmc.authenticated)


if __name__ == '__main__':
    unittest.main()
