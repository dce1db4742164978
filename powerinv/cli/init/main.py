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
The main entry point for the init subcommand.
"""
import logging
import sys

from powerinv.config import ConfigFileExistsError, generate_default_config
from powerinv.util import ensure_permissions

LOGGER = logging.getLogger(__name__)


def do_init(args):
    """Writes a default configuration file.

    Args:
        args: The argparse.Namespace object containing the parsed arguments
            passed to this subcommand.

    Returns:
        None. Exits with status 1 if the file exists and --force was not
        given, or if it cannot be written.
    """
    try:
        path = generate_default_config(args.output, force=args.force)
    except ConfigFileExistsError as err:
        LOGGER.error('%s Use --force to overwrite it.', err)
        sys.exit(1)
    except OSError as err:
        LOGGER.error('Unable to write configuration file: %s', err)
        sys.exit(1)

    ensure_permissions(path)
    print(f'Configuration file written to {path}')
