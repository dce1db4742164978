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
Errors raised while talking to an HMC.
"""

INVALID_CREDENTIALS = 'invalid_credentials'
NETWORK_UNREACHABLE = 'network_unreachable'
TLS_VALIDATION_FAILED = 'tls_validation_failed'
TIMEOUT = 'timeout'
AUTH_ERROR_REASONS = (INVALID_CREDENTIALS, NETWORK_UNREACHABLE, TLS_VALIDATION_FAILED, TIMEOUT)


class AuthError(Exception):
    """A session could not be established with an HMC."""

    def __init__(self, host, reason, detail=''):
        """Create a new AuthError.

        Args:
            host (str): the HMC host.
            reason (str): one of AUTH_ERROR_REASONS.
            detail (str): further information about the failure.
        """
        if reason not in AUTH_ERROR_REASONS:
            raise ValueError(f"Invalid authentication failure reason '{reason}'")
        self.host = host
        self.reason = reason
        self.detail = detail
        super().__init__(str(self))

    def __str__(self):
        message = f'Unable to authenticate to HMC {self.host} ({self.reason})'
        if self.detail:
            message = f'{message}: {self.detail}'
        return message


class HMCFetchError(Exception):
    """A resource could not be retrieved from an HMC after authenticating."""
    pass


class HMCRequestError(HMCFetchError):
    """A REST request to an HMC failed."""
    pass


class HMCCommandError(HMCFetchError):
    """A command run on an HMC over SSH failed."""
    pass
