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
The top-level ArgumentParser of powerinv.
"""
from argparse import ArgumentParser, _SubParsersAction
from importlib.metadata import PackageNotFoundError, version as package_version
import sys

import inflect

import powerinv.cli

LOG_LEVEL_CHOICES = ['debug', 'info', 'warning', 'error', 'critical']


def _unrecognized_msg(unknown, subcommand=None):
    """Describe unrecognized arguments, e.g. 'unrecognized arguments: --a and --b'."""
    inf = inflect.engine()
    where = f' for subcommand {subcommand}' if subcommand else ''
    return f'unrecognized {inf.plural("argument", len(unknown))}{where}: {inf.join(unknown)}'


class PowerInvArgParser(ArgumentParser):
    """An ArgumentParser that shows the help of the subcommand on errors.

    A plain ArgumentParser only shows the top-level usage when the
    arguments of a subcommand are wrong, which does not say what the
    subcommand accepts.
    """
    def parse_args(self, args=None, namespace=None):
        parsed, unknown = self.parse_known_args(args, namespace)

        if parsed.command is None:
            self.print_help()
            self.error(_unrecognized_msg(unknown) if unknown else 'missing subcommand')
        if unknown:
            self.error(_unrecognized_msg(unknown, subcommand=parsed.command))
        return parsed

    def _get_subcommand_parser(self):
        """Get the parser of the subcommand named on the command line, if any."""
        if len(sys.argv) < 2:
            return None
        for action in self._actions:
            if isinstance(action, _SubParsersAction):
                return action.choices.get(sys.argv[1])
        return None

    def error(self, message):
        subcommand_parser = self._get_subcommand_parser()
        if subcommand_parser is not None:
            self._print_message(subcommand_parser.format_help(), file=sys.stderr)
        elif len(sys.argv) > 1 and not any(isinstance(action, _SubParsersAction)
                                           for action in self._actions):
            # This is the parser of a subcommand.
            self._print_message(self.format_usage(), file=sys.stderr)

        self.exit(2, f'{self.prog}: error: {message}\n')


def get_version():
    """Gets the version of the installed powerinv package."""
    try:
        return package_version('powerinv')
    except PackageNotFoundError:
        return 'unknown'


def create_parent_parser():
    """Create the top-level parser with the subparsers of all subcommands.

    Returns:
        A PowerInvArgParser.
    """
    parser = PowerInvArgParser(
        prog='powerinv',
        description='Collect IBM Power inventory reports from HMCs.'
    )

    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {get_version()}')
    parser.add_argument(
        '--logfile',
        help='The log file for this run. Overrides logging.file_name in the config file.')
    parser.add_argument(
        '--loglevel', choices=LOG_LEVEL_CHOICES,
        help='The minimum severity logged to stderr and to the log file for this run. '
             'Overrides the logging levels in the config file.')

    subparsers = parser.add_subparsers(metavar='command', dest='command')
    powerinv.cli.build_out_subparsers(subparsers)

    return parser
