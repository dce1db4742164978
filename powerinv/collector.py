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
Collection of infrastructure reports from HMCs.

Each HMC is handled by a sequential pipeline: authenticate, fetch every
enabled resource kind, extract records, compute metrics, assemble the report,
render it and store the renderings. HMCs are handled concurrently.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
import logging

import inflect

from powerinv.constants import (
    ADAPTERS,
    CLI_COMMANDS,
    CLI_SOURCE,
    LPARS,
    PER_SYSTEM_KINDS,
    RESOURCE_KINDS,
    REST_SOURCE,
    SYSTEMS
)
from powerinv.extract import extract, system_names_by_uuid
from powerinv.hmc import authenticate
from powerinv.hmc.errors import AuthError, HMCFetchError
from powerinv.inventory import get_credentials, InventoryError
from powerinv.metrics import compute
from powerinv.records import build_records
from powerinv.render import render_all
from powerinv.report import assemble, report_identifier
from powerinv.util import BeginEndLogger, get_pretty_table

LOGGER = logging.getLogger(__name__)

INF = inflect.engine()

STATUS_SUCCESS = 'success'
STATUS_AUTH_FAILED = 'authentication failed'
STATUS_FETCH_FAILED = 'fetch failed'
STATUS_NOT_DELIVERED = 'not delivered'
STATUS_ERROR = 'error'


class HMCRunResult:
    """The outcome of collecting from one HMC."""

    def __init__(self, identifier):
        self.identifier = identifier
        self.status = None
        self.error = None
        self.report = None
        self.report_identifier = None
        self.rendered_formats = []
        self.format_failures = {}
        self.destination_results = {}

    @property
    def skipped_record_count(self):
        return self.report.skipped_record_count if self.report else 0

    @property
    def delivered_destinations(self):
        """The destinations that stored every rendered format."""
        if not self.rendered_formats:
            return []
        return [name for name, failures in self.destination_results.items() if not failures]

    @property
    def delivered(self):
        """Whether the report reached at least one destination."""
        return bool(self.delivered_destinations)

    def fail(self, status, error):
        self.status = status
        self.error = str(error)

    def mark_destination_failed(self, name, error):
        """Marks every format stored to a destination as failed."""
        if name in self.destination_results:
            self.destination_results[name] = [(fmt, str(error)) for fmt in self.rendered_formats]
        self.update_status()

    def update_status(self):
        if self.report is not None:
            self.status = STATUS_SUCCESS if self.delivered else STATUS_NOT_DELIVERED


def per_system_command(kind, system_name):
    """Gets the CLI listing command of a resource kind restricted to one managed system."""
    quoted_name = system_name.replace("'", "'\\''")
    return f"{CLI_COMMANDS[kind]} -m '{quoted_name}'"


def kinds_to_fetch(kinds):
    """Gets the resource kinds to fetch to collect `kinds`.

    Managed systems are always fetched with LPARs or adapters because they
    are needed to resolve or query the systems owning them.
    """
    fetched = set(kinds)
    if fetched & set(PER_SYSTEM_KINDS):
        fetched.add(SYSTEMS)
    return [kind for kind in RESOURCE_KINDS if kind in fetched]


def fetch_rest(session, kinds):
    """Fetches the feeds of the given resource kinds over REST.

    Returns:
        dict: resource kinds mapped to response bodies.

    Raises:
        HMCRequestError: if any request fails.
    """
    return {kind: session.get(kind) for kind in kinds_to_fetch(kinds)}


def fetch_cli(shell, kinds):
    """Runs the CLI listing commands of the given resource kinds.

    LPARs and adapters are listed once per managed system.

    Returns:
        dict: SYSTEMS mapped to the output of the systems listing, and the
            other kinds mapped to lists of (system name, output) tuples.

    Raises:
        HMCCommandError: if any command fails.
    """
    fetch_kinds = kinds_to_fetch(kinds)
    raw = {}
    system_names = []
    if SYSTEMS in fetch_kinds:
        raw[SYSTEMS] = shell.run(CLI_COMMANDS[SYSTEMS])
        system_names = [m['name'] for m in extract(SYSTEMS, raw[SYSTEMS], CLI_SOURCE).records]
    for kind in PER_SYSTEM_KINDS:
        if kind in fetch_kinds:
            raw[kind] = [(name, shell.run(per_system_command(kind, name)))
                         for name in system_names]
    return raw


def fetch(target, credentials, method, kinds, attempts):
    """Authenticates to an HMC and fetches the raw responses of all resource kinds.

    Authentication is attempted up to `attempts` times. Nothing is returned
    unless every resource kind was fetched.

    Raises:
        AuthError: if every authentication attempt failed.
        HMCFetchError: if fetching a resource kind failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            with authenticate(method, target.host, target.port, credentials.username,
                              credentials.password, target.validate_certs,
                              target.timeout) as session:
                if method == REST_SOURCE:
                    return fetch_rest(session, kinds)
                return fetch_cli(session, kinds)
        except AuthError as err:
            if attempt >= attempts:
                raise
            LOGGER.warning('%s; retrying (attempt %s of %s).', err, attempt + 1, attempts)


def build_inventory(raw, method, kinds):
    """Extracts and builds the records of the collected resource kinds.

    Returns:
        A tuple (systems, lpars, adapters, skipped) where the records of
        kinds that were not collected are empty.
    """
    if method == REST_SOURCE:
        extractions = {}
        uuid_map = {}
        if SYSTEMS in raw:
            extractions[SYSTEMS] = extract(SYSTEMS, raw[SYSTEMS], REST_SOURCE)
            uuid_map = system_names_by_uuid(extractions[SYSTEMS].records)
        for kind in PER_SYSTEM_KINDS:
            if kind in raw:
                extractions[kind] = extract(kind, raw[kind], REST_SOURCE,
                                            system_names_by_uuid=uuid_map)
        mappings = {kind: list(result.records) for kind, result in extractions.items()}
        skipped = {kind: result.skipped for kind, result in extractions.items()}
    else:
        mappings = {}
        skipped = {}
        if SYSTEMS in raw:
            result = extract(SYSTEMS, raw[SYSTEMS], CLI_SOURCE)
            mappings[SYSTEMS] = list(result.records)
            skipped[SYSTEMS] = result.skipped
        for kind in PER_SYSTEM_KINDS:
            if kind in raw:
                mappings[kind] = []
                skipped[kind] = 0
                for system_name, output in raw[kind]:
                    result = extract(kind, output, CLI_SOURCE, owning_system=system_name)
                    mappings[kind].extend(result.records)
                    skipped[kind] += result.skipped

    records = {}
    total_skipped = 0
    for kind in RESOURCE_KINDS:
        if kind not in kinds:
            records[kind] = ()
            continue
        records[kind], coercion_skipped = build_records(kind, mappings.get(kind, []))
        total_skipped += skipped.get(kind, 0) + coercion_skipped

    return records[SYSTEMS], records[LPARS], records[ADAPTERS], total_skipped


def collect_from_hmc(target, credentials, method, kinds, formats, dispatcher, attempts=1):
    """Runs the pipeline of one HMC.

    Args:
        target (HMCTarget): the HMC.
        credentials (dict): HMC identifiers mapped to Credentials.
        method (str): REST_SOURCE or CLI_SOURCE.
        kinds (Sequence of str): the resource kinds to collect.
        formats (Sequence of str): the formats to render.
        dispatcher (Dispatcher): stores the renderings.
        attempts (int): the number of authentication attempts.

    Returns:
        HMCRunResult: the outcome.
    """
    result = HMCRunResult(target.identifier)
    with BeginEndLogger(f'collection from HMC {target.identifier}', level=logging.INFO):
        timestamp = datetime.now(timezone.utc)
        try:
            hmc_credentials = get_credentials(credentials, target.identifier)
            raw = fetch(target, hmc_credentials, method, kinds, attempts)
        except InventoryError as err:
            LOGGER.error('%s', err)
            result.fail(STATUS_ERROR, err)
            return result
        except AuthError as err:
            LOGGER.error('%s', err)
            result.fail(STATUS_AUTH_FAILED, err)
            return result
        except HMCFetchError as err:
            LOGGER.error('Unable to fetch inventory from HMC %s: %s', target.identifier, err)
            result.fail(STATUS_FETCH_FAILED, err)
            return result

        systems, lpars, adapters, skipped = build_inventory(raw, method, kinds)
        summary = compute(systems, lpars, adapters)
        result.report = assemble(target.identifier, timestamp, systems, lpars, adapters, summary,
                                 source=method, skipped_record_count=skipped,
                                 collected_kinds=kinds)
        result.report_identifier = report_identifier(result.report)

        rendered, failures = render_all(result.report, formats)
        result.rendered_formats = list(rendered)
        result.format_failures = {fmt: str(err) for fmt, err in failures.items()}
        if rendered:
            result.destination_results = dispatcher.store(result.report_identifier, rendered)
        result.update_status()

    return result


def run_collection(targets, credentials, method, kinds, formats, dispatcher,
                   max_workers=4, attempts=1):
    """Collects reports from several HMCs concurrently.

    A failure of one HMC does not affect the others. Destinations are
    finalized once all HMCs are done, and a destination that fails to
    finalize is counted as failed for every HMC that stored to it.

    Returns:
        list of HMCRunResult: one per target, in the order of `targets`.
    """
    results = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='hmc') as executor:
        futures = [
            executor.submit(collect_from_hmc, target, credentials, method, kinds,
                            formats, dispatcher, attempts)
            for target in targets
        ]
        for target, future in zip(targets, futures):
            try:
                results.append(future.result())
            except Exception as err:
                LOGGER.exception('Unexpected error collecting from HMC %s', target.identifier)
                result = HMCRunResult(target.identifier)
                result.fail(STATUS_ERROR, err)
                results.append(result)

    for name, err in dispatcher.finalize().items():
        for result in results:
            result.mark_destination_failed(name, err)

    return results


def _format_statuses(result):
    statuses = [f'{fmt}: ok' for fmt in result.rendered_formats]
    statuses.extend(f'{fmt}: failed' for fmt in result.format_failures)
    return ', '.join(statuses) or '-'


def _destination_statuses(result):
    statuses = []
    for name, failures in result.destination_results.items():
        statuses.append(f'{name}: failed' if failures else f'{name}: ok')
    return ', '.join(statuses) or '-'


def get_run_summary_table(results):
    """Gets a table summarizing the outcome of each HMC.

    Returns:
        A PrettyTable instance.
    """
    headings = ['HMC', 'Status', 'Systems', 'LPARs', 'Adapters', 'Skipped',
                'Formats', 'Destinations']
    rows = []
    for result in results:
        summary = result.report.summary if result.report else None
        rows.append([
            result.identifier,
            result.status if result.report else f'{result.status}: {result.error}',
            summary.total_systems if summary else '-',
            summary.total_lpars if summary else '-',
            summary.total_adapters if summary else '-',
            result.skipped_record_count,
            _format_statuses(result),
            _destination_statuses(result),
        ])
    return get_pretty_table(rows, headings)


def log_run_summary(results):
    """Logs the outcome of a run."""
    delivered = [r for r in results if r.delivered]
    skipped = sum(r.skipped_record_count for r in results)
    for result in results:
        if result.delivered:
            LOGGER.info('HMC %s: report %s delivered to %s', result.identifier,
                        result.report_identifier, ', '.join(result.delivered_destinations))
        else:
            LOGGER.warning('HMC %s: %s%s', result.identifier, result.status,
                           f' ({result.error})' if result.error else '')
    LOGGER.info('Delivered reports of %s of %s; skipped %s.',
                len(delivered), INF.no('HMC', len(results)), INF.no('record', skipped))
