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
Session with the REST API of an HMC.
"""
import logging
from urllib.parse import urlunparse
from xml.sax.saxutils import escape
import xml.etree.ElementTree as ET

import requests

from powerinv.constants import LOGON_PATH, REST_CONTENT_TYPES, REST_RESOURCE_PATHS
from powerinv.extract import local_name
from powerinv.hmc.errors import (
    AuthError,
    HMCRequestError,
    INVALID_CREDENTIALS,
    NETWORK_UNREACHABLE,
    TIMEOUT,
    TLS_VALIDATION_FAILED
)

LOGGER = logging.getLogger(__name__)

SESSION_HEADER = 'X-API-Session'
LOGON_HEADERS = {
    'Content-Type': 'application/vnd.ibm.powervm.web+xml; type=LogonRequest',
    'Accept': 'application/vnd.ibm.powervm.web+xml; type=LogonResponse',
}
LOGON_REQUEST_TEMPLATE = """\
<LogonRequest xmlns="http://www.ibm.com/xmlns/systems/power/firmware/web/mc/2012_10/" \
schemaVersion="V1_0">
  <Metadata>
    <Atom/>
  </Metadata>
  <UserID kb="CUR" kxe="false">{username}</UserID>
  <Password kb="CUR" kxe="false">{password}</Password>
</LogonRequest>
"""
UOM_MEDIA_TYPE = 'application/vnd.ibm.powervm.uom+xml; type={}'
AUTH_FAILURE_CODES = (401, 403)


def _auth_error_reason(err):
    """Maps a requests exception raised while logging on to an AuthError reason."""
    if isinstance(err, requests.exceptions.SSLError):
        return TLS_VALIDATION_FAILED
    if isinstance(err, requests.exceptions.Timeout):
        return TIMEOUT
    return NETWORK_UNREACHABLE


class HMCRestSession:
    """An authenticated session with the REST API of one HMC.

    Use as a context manager: the session logs on when entering and always
    logs off when exiting, even if an exception was raised in between.
    """

    def __init__(self, host, port, username, password, validate_certs=True, timeout=60):
        """Create a new HMCRestSession.

        Args:
            host (str): the HMC host name or address.
            port (int): the HTTPS port of the REST API.
            username (str): the HMC user.
            password (str): the password of the HMC user.
            validate_certs (bool): whether to validate the HMC's certificate.
            timeout (int): seconds to wait for connections and responses.
        """
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.validate_certs = validate_certs
        self.timeout = timeout
        self.session = None
        self.token = None

    def _url(self, path):
        return urlunparse(('https', f'{self.host}:{self.port}', path, '', '', ''))

    @property
    def authenticated(self):
        return self.token is not None

    def logon(self):
        """Logs on to the HMC and stores the session token.

        Raises:
            AuthError: if the HMC cannot be reached or rejects the credentials.
        """
        self.session = requests.Session()
        self.session.verify = self.validate_certs
        body = LOGON_REQUEST_TEMPLATE.format(username=escape(self.username),
                                             password=escape(self.password))
        url = self._url(LOGON_PATH)
        LOGGER.debug("Logging on to HMC at '%s' as user '%s'", url, self.username)

        try:
            response = self.session.post(url, data=body, headers=LOGON_HEADERS,
                                         timeout=self.timeout)
        except requests.exceptions.RequestException as err:
            self._close()
            raise AuthError(self.host, _auth_error_reason(err), str(err)) from err

        if response.status_code in AUTH_FAILURE_CODES:
            self._close()
            raise AuthError(self.host, INVALID_CREDENTIALS,
                            f'logon rejected with status code {response.status_code}')
        if not response.ok:
            self._close()
            raise AuthError(self.host, NETWORK_UNREACHABLE,
                            f'logon failed with status code {response.status_code}: '
                            f'{response.reason}')

        token = self._parse_token(response.text)
        if not token:
            self._close()
            raise AuthError(self.host, INVALID_CREDENTIALS,
                            'logon response did not contain a session token')

        self.token = token
        self.session.headers[SESSION_HEADER] = token
        LOGGER.info('Logged on to HMC %s', self.host)

    @staticmethod
    def _parse_token(text):
        """Gets the session token from the body of a logon response."""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as err:
            LOGGER.debug('Unable to parse logon response: %s', err)
            return None
        for element in root.iter():
            if local_name(element.tag) == SESSION_HEADER:
                return (element.text or '').strip() or None
        return None

    def logoff(self):
        """Logs off from the HMC.

        A failure to log off is logged and not raised.
        """
        if not self.authenticated:
            self._close()
            return
        try:
            response = self.session.delete(self._url(LOGON_PATH), timeout=self.timeout)
        except requests.exceptions.RequestException as err:
            LOGGER.warning('Unable to log off from HMC %s: %s', self.host, err)
        else:
            if response.ok:
                LOGGER.info('Logged off from HMC %s', self.host)
            else:
                LOGGER.warning('Unable to log off from HMC %s: status code %s',
                               self.host, response.status_code)
        finally:
            self.token = None
            self._close()

    def _close(self):
        if self.session is not None:
            self.session.close()
            self.session = None

    def get(self, kind):
        """Gets the feed of a resource kind.

        Args:
            kind (str): one of the keys of REST_RESOURCE_PATHS.

        Returns:
            str: the body of the response, empty if there are no resources.

        Raises:
            HMCRequestError: if the request fails.
        """
        if not self.authenticated:
            raise HMCRequestError(f'Not logged on to HMC {self.host}')

        url = self._url(REST_RESOURCE_PATHS[kind])
        media_type = UOM_MEDIA_TYPE.format(REST_CONTENT_TYPES[kind])
        headers = {'Accept': f'application/atom+xml, {media_type}'}
        LOGGER.debug("Issuing GET request to URL '%s'", url)
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as err:
            raise HMCRequestError(f"GET request to URL '{url}' failed: {err}") from err

        LOGGER.debug("Received response to GET request to URL '%s' with status code: '%s'",
                     url, response.status_code)
        if response.status_code == 204:
            return ''
        if not response.ok:
            raise HMCRequestError(f"GET request to URL '{url}' failed with status code "
                                  f"{response.status_code}: {response.reason}")
        return response.text

    def __enter__(self):
        self.logon()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logoff()
