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
Assembly of the infrastructure report of one HMC.
"""
from collections import namedtuple
from datetime import datetime, timezone
import logging

import inflect

from powerinv.constants import (
    ADAPTERS,
    LPARS,
    REPORT_FILE_PREFIXES,
    REPORT_TIMESTAMP_FORMAT,
    RESOURCE_KINDS,
    REST_SOURCE,
    SYSTEMS
)
from powerinv.metrics import summary_as_dict
from powerinv.records import record_as_dict

LOGGER = logging.getLogger(__name__)

INF = inflect.engine()

ISO_TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

InfrastructureReport = namedtuple('InfrastructureReport', [
    'hmc_identifier',
    'collection_timestamp',
    'source',
    'managed_systems',
    'lpars',
    'adapters',
    'summary',
    'integrity_warnings',
    'skipped_record_count',
])


def format_timestamp(timestamp):
    """Formats a datetime as an ISO-8601 UTC timestamp.

    Naive datetimes are taken to be in UTC already.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime(ISO_TIMESTAMP_FORMAT)


def _range_warnings(lpar, dimension, minimum, current, maximum):
    if None in (minimum, current, maximum):
        return []
    if minimum <= current <= maximum:
        return []
    return [f"LPAR '{lpar.name}' on system '{lpar.owning_system_name}' has {dimension} "
            f"outside of its range: min {minimum}, current {current}, max {maximum}"]


def _system_warnings(systems):
    warnings = []
    seen = set()
    for system in systems:
        if system.name in seen:
            warnings.append(f"Duplicate managed system name '{system.name}'")
        seen.add(system.name)

        for dimension, total, available in (
                ('memory', system.total_memory_mb, system.available_memory_mb),
                ('processors', system.total_processors, system.available_processors)):
            if total is not None and available is not None and available > total:
                warnings.append(
                    f"Managed system '{system.name}' reports more available {dimension} "
                    f"({available}) than total ({total}); its {dimension} utilization "
                    f"is not reported"
                )
    return warnings


def _lpar_warnings(lpars, system_names):
    warnings = []
    seen = set()
    for lpar in lpars:
        key = (lpar.owning_system_name, lpar.partition_id)
        if lpar.partition_id is not None and key in seen:
            warnings.append(f"Duplicate partition ID {lpar.partition_id} "
                            f"on system '{lpar.owning_system_name}'")
        seen.add(key)

        if system_names is not None and lpar.owning_system_name not in system_names:
            if lpar.owning_system_name is None:
                warnings.append(f"LPAR '{lpar.name}' has no known owning system")
            else:
                warnings.append(f"LPAR '{lpar.name}' references unknown managed system "
                                f"'{lpar.owning_system_name}'")

        warnings.extend(_range_warnings(lpar, 'memory', lpar.min_memory_mb,
                                        lpar.memory_mb, lpar.max_memory_mb))
        warnings.extend(_range_warnings(lpar, 'processor units', lpar.processor_units_min,
                                        lpar.processor_units_current, lpar.processor_units_max))
    return warnings


def _adapter_warnings(adapters, system_names, lpar_keys):
    warnings = []
    seen = set()
    lpar_names = {name for _, name in lpar_keys} if lpar_keys is not None else None
    for adapter in adapters:
        key = (adapter.owning_system_name, adapter.drc_name)
        if key in seen:
            warnings.append(f"Duplicate DRC name '{adapter.drc_name}'"
                            f" on system '{adapter.owning_system_name}'")
        seen.add(key)

        # LPAR names are only unique within one managed system.
        if lpar_keys is not None and adapter.owning_partition_name:
            message = (f"Adapter '{adapter.drc_name}' references unknown LPAR "
                       f"'{adapter.owning_partition_name}'")
            if adapter.owning_system_name is None:
                if adapter.owning_partition_name not in lpar_names:
                    warnings.append(message)
            elif (adapter.owning_system_name, adapter.owning_partition_name) not in lpar_keys:
                warnings.append(f"{message} on system '{adapter.owning_system_name}'")
        if (system_names is not None and adapter.owning_system_name is not None
                and adapter.owning_system_name not in system_names):
            warnings.append(f"Adapter '{adapter.drc_name}' references unknown managed system "
                            f"'{adapter.owning_system_name}'")
    return warnings


def integrity_warnings(systems, lpars, adapters, skipped_record_count=0,
                       collected_kinds=RESOURCE_KINDS):
    """Checks the consistency of the records of one HMC.

    References to a resource kind that was not collected are not checked.

    Returns:
        tuple of str: the warnings found.
    """
    system_names = {s.name for s in systems} if SYSTEMS in collected_kinds else None
    lpar_keys = ({(lpar.owning_system_name, lpar.name) for lpar in lpars}
                 if LPARS in collected_kinds else None)

    warnings = []
    if skipped_record_count:
        warnings.append(f'Skipped {skipped_record_count} '
                        f'{INF.plural("record", skipped_record_count)} that could not be read')
    warnings.extend(_system_warnings(systems))
    if LPARS in collected_kinds:
        warnings.extend(_lpar_warnings(lpars, system_names))
    if ADAPTERS in collected_kinds:
        warnings.extend(_adapter_warnings(adapters, system_names, lpar_keys))
    return tuple(warnings)


def assemble(hmc_identifier, timestamp, systems, lpars, adapters, summary,
             source=REST_SOURCE, skipped_record_count=0, collected_kinds=RESOURCE_KINDS):
    """Assembles the infrastructure report of one HMC.

    Dangling references and inconsistent values are reported as integrity
    warnings on the report and never prevent it from being built.

    Args:
        hmc_identifier (str): the identifier of the HMC.
        timestamp (datetime): the time of collection.
        systems (Sequence of ManagedSystem): the managed systems.
        lpars (Sequence of LogicalPartition): the logical partitions.
        adapters (Sequence of PhysicalAdapter): the physical adapters.
        summary (Summary): the metrics computed over the records.
        source (str): the way the HMC was queried, REST_SOURCE or CLI_SOURCE.
        skipped_record_count (int): the number of records that could not be read.
        collected_kinds (Iterable of str): the resource kinds that were collected.

    Returns:
        InfrastructureReport: the report.
    """
    warnings = integrity_warnings(systems, lpars, adapters, skipped_record_count,
                                  collected_kinds)
    for warning in warnings:
        LOGGER.warning('HMC %s: %s', hmc_identifier, warning)

    return InfrastructureReport(
        hmc_identifier=hmc_identifier,
        collection_timestamp=format_timestamp(timestamp),
        source=source,
        managed_systems=tuple(systems),
        lpars=tuple(lpars),
        adapters=tuple(adapters),
        summary=summary,
        integrity_warnings=warnings,
        skipped_record_count=skipped_record_count,
    )


def report_identifier(report):
    """Gets the identifier used to name the rendered files of the report.

    Returns:
        str: e.g. 'power_infrastructure_hmc01_2026-10-18_12-00-00'.
    """
    timestamp = datetime.strptime(report.collection_timestamp, ISO_TIMESTAMP_FORMAT)
    return '{}_{}_{}'.format(REPORT_FILE_PREFIXES[report.source], report.hmc_identifier,
                             timestamp.strftime(REPORT_TIMESTAMP_FORMAT))


def report_as_dict(report):
    """Gets a structure of plain dicts, lists and scalars for the report."""
    return {
        'hmc_identifier': report.hmc_identifier,
        'collection_timestamp': report.collection_timestamp,
        'source': report.source,
        'managed_systems': [record_as_dict(s) for s in report.managed_systems],
        'lpars': [record_as_dict(lpar) for lpar in report.lpars],
        'adapters': [record_as_dict(a) for a in report.adapters],
        'summary': summary_as_dict(report.summary),
        'integrity_warnings': list(report.integrity_warnings),
        'skipped_record_count': report.skipped_record_count,
    }
