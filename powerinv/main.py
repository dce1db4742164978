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
Entry point of the powerinv command.
"""

import importlib
import logging
import sys

import argcomplete

from powerinv.config import load_config
from powerinv.logging import bootstrap_logging, configure_logging
from powerinv.parser import create_parent_parser

LOGGER = logging.getLogger(__name__)

# Subcommands that run before a config file exists.
NO_CONFIG_SUBCOMMANDS = ('init',)


def get_subcommand_function(subcommand):
    """Import the main module of a subcommand and get its do_<subcommand> function.

    Returns:
        The function, or None if the module does not define it.
    """
    module = importlib.import_module(f'powerinv.cli.{subcommand}.main')
    return getattr(module, f'do_{subcommand}', None)


def main():
    """Run the subcommand given on the command line.

    Returns:
        None. Calls sys.exit().
    """
    try:
        bootstrap_logging()

        parser = create_parent_parser()
        argcomplete.autocomplete(parser)
        args = parser.parse_args()

        if args.command not in NO_CONFIG_SUBCOMMANDS:
            load_config(args)
            configure_logging()

        subcommand = get_subcommand_function(args.command)
        if subcommand is None:
            LOGGER.error("Couldn't find function 'powerinv.cli.%s.main.do_%s'.",
                         args.command, args.command)
            sys.exit(1)

        subcommand(args)

    except KeyboardInterrupt:
        LOGGER.info("Received keyboard interrupt; quitting.", exc_info=True)
        sys.exit(130)

    sys.exit(0)


if __name__ == '__main__':
    main()
