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
Derived metrics computed over the records collected from one HMC.
"""
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP
import logging

from powerinv.constants import NOT_APPLICABLE, UNKNOWN_VALUE

LOGGER = logging.getLogger(__name__)

PERCENT_QUANTUM = Decimal('0.1')

DEDICATED_LABEL = 'Dedicated'
SHARED_LABEL = 'Shared'
SHARED_CAPPED_LABEL = 'Shared-Capped'
SHARED_UNCAPPED_LABEL = 'Shared-Uncapped'

ProcessorClassification = namedtuple('ProcessorClassification', ['label', 'sharing'])

SystemUtilization = namedtuple('SystemUtilization', [
    'name',
    'total_memory_mb', 'available_memory_mb', 'memory_used_mb', 'memory_utilization_pct',
    'total_processors', 'available_processors', 'processors_used', 'processor_utilization_pct',
])

LparClassification = namedtuple('LparClassification', [
    'name', 'owning_system_name', 'processor_classification', 'processor_sharing'
])

Summary = namedtuple('Summary', [
    'total_systems',
    'total_lpars',
    'lpars_by_state',
    'lpars_by_processor_classification',
    'lpar_processor_classifications',
    'total_adapters',
    'assigned_adapter_count',
    'unassigned_adapter_count',
    'unassigned_adapters',
    'adapters_by_lpar',
    'system_utilization',
    'aggregate_utilization',
])


def round_half_up(value):
    """Rounds a Decimal to one decimal place, with halves rounded up."""
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def is_consistent(total, available):
    """Returns whether total and available amounts are present and consistent."""
    return (total is not None and available is not None
            and 0 <= available <= total)


def used_amount(total, available):
    """Gets total minus available, or None if the amounts are inconsistent."""
    if not is_consistent(total, available):
        return None
    return total - available


def utilization_pct(total, available):
    """Gets the percentage of `total` that is in use.

    Args:
        total (int or Decimal): the total amount.
        available (int or Decimal): the amount still available.

    Returns:
        Decimal: the utilization rounded to one decimal place, always within
            [0, 100], or None if `total` is zero or the amounts are missing or
            inconsistent.
    """
    if not is_consistent(total, available) or total == 0:
        return None
    used = Decimal(total) - Decimal(available)
    return round_half_up(used / Decimal(total) * 100)


def classify_processor(processor_mode, processor_sharing):
    """Derives the processor classification label of an LPAR.

    Args:
        processor_mode (str): 'dedicated', 'shared' or None.
        processor_sharing (str): 'capped', 'uncapped', another sharing mode,
            or None.

    Returns:
        A ProcessorClassification. The sharing is 'N/A' for dedicated LPARs
        and 'Unknown' when it is not known.
    """
    if processor_mode == 'dedicated':
        return ProcessorClassification(DEDICATED_LABEL, NOT_APPLICABLE)
    if processor_mode == 'shared':
        if processor_sharing == 'capped':
            return ProcessorClassification(SHARED_CAPPED_LABEL, processor_sharing)
        if processor_sharing == 'uncapped':
            return ProcessorClassification(SHARED_UNCAPPED_LABEL, processor_sharing)
        return ProcessorClassification(SHARED_LABEL, UNKNOWN_VALUE)
    return ProcessorClassification(UNKNOWN_VALUE, processor_sharing or UNKNOWN_VALUE)


def _count_by(values):
    """Counts values in order of first appearance, counting None as 'Unknown'."""
    counts = {}
    for value in values:
        key = value if value else UNKNOWN_VALUE
        counts[key] = counts.get(key, 0) + 1
    return counts


def system_utilization(system):
    """Computes the utilization of one managed system."""
    return SystemUtilization(
        name=system.name,
        total_memory_mb=system.total_memory_mb,
        available_memory_mb=system.available_memory_mb,
        memory_used_mb=used_amount(system.total_memory_mb, system.available_memory_mb),
        memory_utilization_pct=utilization_pct(system.total_memory_mb,
                                               system.available_memory_mb),
        total_processors=system.total_processors,
        available_processors=system.available_processors,
        processors_used=used_amount(system.total_processors, system.available_processors),
        processor_utilization_pct=utilization_pct(system.total_processors,
                                                  system.available_processors),
    )


def aggregate_utilization(systems):
    """Computes utilization across all systems with consistent values.

    Systems whose total and available amounts are missing or inconsistent do
    not contribute to the corresponding aggregate.

    Returns:
        dict: aggregate totals, used amounts and utilization percentages.
    """
    memory_systems = [s for s in systems
                      if is_consistent(s.total_memory_mb, s.available_memory_mb)]
    processor_systems = [s for s in systems
                         if is_consistent(s.total_processors, s.available_processors)]

    total_memory = sum(s.total_memory_mb for s in memory_systems)
    available_memory = sum(s.available_memory_mb for s in memory_systems)
    total_processors = sum((s.total_processors for s in processor_systems), Decimal(0))
    available_processors = sum((s.available_processors for s in processor_systems), Decimal(0))

    return {
        'total_memory_mb': total_memory,
        'available_memory_mb': available_memory,
        'memory_used_mb': total_memory - available_memory,
        'memory_utilization_pct': utilization_pct(total_memory, available_memory),
        'total_processors': total_processors,
        'available_processors': available_processors,
        'processors_used': total_processors - available_processors,
        'processor_utilization_pct': utilization_pct(total_processors, available_processors),
    }


def _owning_system_key(adapter, systems_by_lpar_name):
    """Gets the name of the system whose LPAR an adapter is assigned to."""
    if adapter.owning_system_name:
        return adapter.owning_system_name
    candidates = systems_by_lpar_name.get(adapter.owning_partition_name, set())
    if len(candidates) == 1:
        return next(iter(candidates))
    return UNKNOWN_VALUE


def group_adapters_by_lpar(lpars, adapters):
    """Groups the DRC names of assigned adapters by system and LPAR.

    LPAR names are only unique within one managed system, so the adapters are
    grouped under the system name first. A system or LPAR name that is not
    known is grouped under 'Unknown'.

    Returns:
        A tuple of the dict mapping system name to a dict mapping LPAR name to
        a tuple of DRC names, and the tuple of DRC names of unassigned adapters.
    """
    grouped = {}
    systems_by_lpar_name = {}
    for lpar in lpars:
        system_key = lpar.owning_system_name or UNKNOWN_VALUE
        grouped.setdefault(system_key, {}).setdefault(lpar.name, [])
        systems_by_lpar_name.setdefault(lpar.name, set()).add(system_key)

    unassigned = []
    for adapter in adapters:
        if not adapter.owning_partition_name:
            unassigned.append(adapter.drc_name)
            continue
        system_key = _owning_system_key(adapter, systems_by_lpar_name)
        grouped.setdefault(system_key, {}).setdefault(
            adapter.owning_partition_name, []
        ).append(adapter.drc_name)

    return (
        {system_key: {name: tuple(drc_names) for name, drc_names in by_lpar.items()}
         for system_key, by_lpar in grouped.items()},
        tuple(unassigned),
    )


def compute(systems, lpars, adapters):
    """Computes the summary of the given records.

    Args:
        systems (Sequence of ManagedSystem): the managed systems.
        lpars (Sequence of LogicalPartition): the logical partitions.
        adapters (Sequence of PhysicalAdapter): the physical adapters.

    Returns:
        A Summary.
    """
    classifications = []
    for lpar in lpars:
        classification = classify_processor(lpar.processor_mode, lpar.processor_sharing)
        classifications.append(LparClassification(
            lpar.name, lpar.owning_system_name, classification.label, classification.sharing
        ))

    adapters_by_lpar, unassigned = group_adapters_by_lpar(lpars, adapters)

    return Summary(
        total_systems=len(systems),
        total_lpars=len(lpars),
        lpars_by_state=_count_by(lpar.state for lpar in lpars),
        lpars_by_processor_classification=_count_by(
            c.processor_classification for c in classifications
        ),
        lpar_processor_classifications=tuple(classifications),
        total_adapters=len(adapters),
        assigned_adapter_count=len(adapters) - len(unassigned),
        unassigned_adapter_count=len(unassigned),
        unassigned_adapters=unassigned,
        adapters_by_lpar=adapters_by_lpar,
        system_utilization=tuple(system_utilization(system) for system in systems),
        aggregate_utilization=aggregate_utilization(systems),
    )


def summary_as_dict(summary):
    """Gets a structure of plain dicts, lists and scalars for the summary."""
    result = dict(summary._asdict())
    result['lpar_processor_classifications'] = [
        dict(c._asdict()) for c in summary.lpar_processor_classifications
    ]
    result['unassigned_adapters'] = list(summary.unassigned_adapters)
    result['adapters_by_lpar'] = {
        system_key: {name: list(drc_names) for name, drc_names in by_lpar.items()}
        for system_key, by_lpar in summary.adapters_by_lpar.items()
    }
    result['system_utilization'] = [dict(u._asdict()) for u in summary.system_utilization]
    result['lpars_by_state'] = dict(summary.lpars_by_state)
    result['lpars_by_processor_classification'] = dict(
        summary.lpars_by_processor_classification
    )
    result['aggregate_utilization'] = dict(summary.aggregate_utilization)
    return result
