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
Configure how warnings from the warnings module should be logged.
"""

import logging
import re
import warnings

from urllib3.exceptions import InsecureRequestWarning


def configure_insecure_request_warnings(hosts):
    """Configure the handling of InsecureRequestWarning.

    HMCs are commonly reached with certificate validation disabled. Rather
    than a warning per request, one warning is logged per HMC host.

    Args:
        hosts (Iterable of str): the HMC hosts requests will be made to.

    Returns:
        None.
    """
    logging.captureWarnings(True)

    # Use filters with regexes matching each host, so that the 'once' action
    # will log one warning per host to which an insecure request is made,
    # rather than just one warning after the first insecure request.
    for host in hosts:
        warnings.filterwarnings(
            action='once', category=InsecureRequestWarning,
            message=rf'^.*\'{re.escape(host)}\''
        )

    # Overriding formatwarning makes the format of the insecure request
    # warnings look much nicer.
    orig_format_warning = warnings.formatwarning

    def format_warning(warning, *args, **kwargs):
        if not isinstance(warning, InsecureRequestWarning):
            return orig_format_warning(warning, *args, **kwargs)

        return str(warning)
    warnings.formatwarning = format_warning
