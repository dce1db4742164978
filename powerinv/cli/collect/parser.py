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
The parser for the collect subcommand.
"""
from argparse import ArgumentTypeError

from powerinv.constants import DESTINATIONS, REPORT_FORMATS, RESOURCE_KINDS, SOURCES


def on_off_str2bool(value):
    """Convert a case-insensitive 'on' or 'off' switch value to a bool.

    Raises:
        argparse.ArgumentTypeError: for any other value.
    """
    switch = value.lower()
    if switch not in ('on', 'off'):
        raise ArgumentTypeError(f"Expected 'on' or 'off', got '{value}'.")
    return switch == 'on'


def _add_kind_options(option_group):
    """Adds a '--<kind>' on/off option for each resource kind."""
    descriptions = {
        'systems': 'managed systems',
        'lpars': 'logical partitions',
        'adapters': 'physical I/O adapters',
    }
    for kind in RESOURCE_KINDS:
        option_group.add_argument(
            f'--{kind}', dest=f'collect_{kind}', metavar='on|off', type=on_off_str2bool,
            help=f"Specify 'on' or 'off' to collect {descriptions[kind]} or not. "
                 f"Overrides the '{kind}' option of the 'collection' section of the "
                 f"config file. Defaults to 'on'."
        )


def add_collect_subparser(subparsers):
    """Add the collect subparser to the parent parser.

    Args:
        subparsers: The argparse.ArgumentParser object returned by the
            add_subparsers method.
    """
    collect_parser = subparsers.add_parser(
        'collect', help='Collect infrastructure reports from HMCs.',
        description='Collect managed systems, logical partitions and adapters from '
                    'the HMCs in the inventory, and persist a report per HMC in '
                    'each of the selected formats to each of the selected destinations.'
    )

    hmc_group = collect_parser.add_argument_group('HMC options')
    hmc_group.add_argument(
        '--method', choices=SOURCES,
        help="How to query the HMCs: 'rest' for the REST API, 'cli' for commands "
             "over SSH. Overrides value set in config file.")
    hmc_group.add_argument(
        '--inventory',
        help='Path to the YAML file listing the HMCs. Overrides value set in config file.')
    hmc_group.add_argument(
        '--credentials',
        help='Path to the decrypted YAML file of HMC credentials. Overrides value set '
             'in config file.')
    hmc_group.add_argument(
        '--hmc', action='append', dest='hmc_ids', metavar='HMC',
        help='Only collect from the HMC with this identifier. May be given more than once.')
    hmc_group.add_argument(
        '--timeout', type=int,
        help='Seconds to wait for each HMC connection, request and command. Overrides '
             'value set in config file.')

    collection_group = collect_parser.add_argument_group('Collection options')
    _add_kind_options(collection_group)
    collection_group.add_argument(
        '--max-workers', type=int,
        help='The maximum number of HMCs to collect from at the same time. Overrides '
             'value set in config file.')

    output_group = collect_parser.add_argument_group('Output options')
    output_group.add_argument(
        '--formats',
        help='Comma-separated list of report formats to generate, from: {}. Overrides '
             'value set in config file.'.format(', '.join(REPORT_FORMATS)))
    output_group.add_argument(
        '--destinations',
        help='Comma-separated list of destinations to persist reports to, from: {}. '
             'Overrides value set in config file.'.format(', '.join(DESTINATIONS)))
    output_group.add_argument(
        '--output-dir',
        help="Directory written by the 'local' destination. Overrides value set in "
             "config file.")
