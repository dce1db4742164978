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
The main entry point for the collect subcommand.
"""
import logging
import sys

import inflect

from powerinv.collector import get_run_summary_table, log_run_summary, run_collection
from powerinv.config import get_config_value, split_list_option
from powerinv.constants import RESOURCE_KINDS
from powerinv.inventory import InventoryError, load_credentials, load_hmcs
from powerinv.persistence import Dispatcher
from powerinv.warnings import configure_insecure_request_warnings

LOGGER = logging.getLogger(__name__)

INF = inflect.engine()


def _unique(items):
    """Removes duplicates from a list, keeping the first occurrence."""
    return list(dict.fromkeys(items))


def get_targets(args, method):
    """Loads the HMCs to collect from, limited to those given with --hmc.

    Raises:
        InventoryError: if the inventory cannot be loaded or an HMC given
            with --hmc is not in it.
    """
    targets = load_hmcs(get_config_value('inventory.hmcs_file'), method)
    hmc_ids = getattr(args, 'hmc_ids', None)
    if not hmc_ids:
        return targets

    known_ids = {target.identifier for target in targets}
    unknown_ids = [hmc_id for hmc_id in hmc_ids if hmc_id not in known_ids]
    if unknown_ids:
        raise InventoryError('{} not in the inventory: {}'.format(
            INF.plural('HMC', len(unknown_ids)), ', '.join(unknown_ids)
        ))
    return [target for target in targets if target.identifier in hmc_ids]


def do_collect(args):
    """Collects infrastructure reports from the HMCs in the inventory.

    Args:
        args: The argparse.Namespace object containing the parsed arguments
            passed to this subcommand.

    Returns:
        None. Exits with status 1 if no HMC's report was delivered.
    """
    method = get_config_value('hmc.method')
    kinds = [kind for kind in RESOURCE_KINDS if get_config_value(f'collection.{kind}')]
    if not kinds:
        LOGGER.error('All resource kinds are disabled; nothing to collect.')
        sys.exit(1)
    formats = _unique(split_list_option(get_config_value('output.formats')))
    destinations = _unique(split_list_option(get_config_value('output.destinations')))
    if not formats or not destinations:
        LOGGER.error('At least one report format and one destination are required.')
        sys.exit(1)

    try:
        targets = get_targets(args, method)
        credentials = load_credentials(get_config_value('inventory.credentials_file'))
    except InventoryError as err:
        LOGGER.error('%s', err)
        sys.exit(1)

    LOGGER.info('Collecting %s from %s using %s; formats: %s; destinations: %s',
                ', '.join(kinds), INF.no('HMC', len(targets)), method,
                ', '.join(formats), ', '.join(destinations))

    configure_insecure_request_warnings([target.host for target in targets])
    dispatcher = Dispatcher(destinations)
    results = run_collection(
        targets, credentials, method, kinds, formats, dispatcher,
        max_workers=get_config_value('collection.max_workers'),
        attempts=get_config_value('collection.auth_retries') + 1
    )

    print(get_run_summary_table(results))
    log_run_summary(results)

    if not any(result.delivered for result in results):
        LOGGER.error('No HMC produced a delivered report.')
        sys.exit(1)
