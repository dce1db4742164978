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
Sessions with Hardware Management Consoles.
"""
from powerinv.constants import CLI_SOURCE, REST_SOURCE
from powerinv.hmc.rest import HMCRestSession
from powerinv.hmc.ssh import HMCShell


def authenticate(source, host, port, username, password, validate_certs=True, timeout=60):
    """Gets an unopened session with an HMC for the given source.

    The returned object is a context manager that authenticates on entry and
    releases the session on exit.

    Raises:
        ValueError: if `source` is unknown.
    """
    if source == REST_SOURCE:
        return HMCRestSession(host, port, username, password, validate_certs, timeout)
    elif source == CLI_SOURCE:
        return HMCShell(host, port, username, password, validate_certs, timeout)
    raise ValueError(f"Unknown HMC access method '{source}'")
