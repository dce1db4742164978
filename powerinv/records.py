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
Immutable inventory records and the fields they are built from.
"""
from collections import namedtuple
import logging

import inflect

from powerinv.constants import ADAPTERS, LPARS, SYSTEMS
from powerinv.field import RecordField, to_decimal, to_int, to_lower

LOGGER = logging.getLogger(__name__)

INF = inflect.engine()

SYSTEM_FIELDS = (
    RecordField('Name'),
    RecordField('Serial Number'),
    RecordField('Machine Type Model Serial'),
    RecordField('State'),
    RecordField('Firmware Level'),
    RecordField('Description'),
    RecordField('Total Memory (MB)', to_int),
    RecordField('Available Memory (MB)', to_int),
    RecordField('Total Processors', to_decimal),
    RecordField('Available Processors', to_decimal),
)

LPAR_FIELDS = (
    RecordField('Name'),
    RecordField('Partition ID', to_int),
    RecordField('Serial Number'),
    RecordField('Description'),
    RecordField('State'),
    RecordField('OS Version'),
    RecordField('Memory (MB)', to_int),
    RecordField('Min Memory (MB)', to_int),
    RecordField('Max Memory (MB)', to_int),
    RecordField('Processor Mode', to_lower),
    RecordField('Processor Sharing', to_lower),
    RecordField('Current Processor Units', to_decimal, property_name='processor_units_current'),
    RecordField('Min Processor Units', to_decimal, property_name='processor_units_min'),
    RecordField('Max Processor Units', to_decimal, property_name='processor_units_max'),
    RecordField('Owning System', property_name='owning_system_name'),
)

ADAPTER_FIELDS = (
    RecordField('DRC Name'),
    RecordField('Adapter Type'),
    RecordField('Physical Location'),
    RecordField('Description'),
    RecordField('Owning Partition', property_name='owning_partition_name'),
    RecordField('Owning System', property_name='owning_system_name'),
)

ManagedSystem = namedtuple('ManagedSystem', [f.property_name for f in SYSTEM_FIELDS])
LogicalPartition = namedtuple('LogicalPartition', [f.property_name for f in LPAR_FIELDS])
PhysicalAdapter = namedtuple('PhysicalAdapter', [f.property_name for f in ADAPTER_FIELDS])

# The record type, its fields, and the field identifying a record, per kind.
RecordKind = namedtuple('RecordKind', ['record_type', 'fields', 'key_field', 'pretty_name'])

RECORD_KINDS = {
    SYSTEMS: RecordKind(ManagedSystem, SYSTEM_FIELDS, 'name', 'managed system'),
    LPARS: RecordKind(LogicalPartition, LPAR_FIELDS, 'name', 'logical partition'),
    ADAPTERS: RecordKind(PhysicalAdapter, ADAPTER_FIELDS, 'drc_name', 'adapter'),
}


class RecordCoercionError(Exception):
    """A field mapping could not be converted to a record."""
    pass


def get_record_kind(kind):
    """Gets the RecordKind for the given resource kind.

    Raises:
        ValueError: if `kind` is not a known resource kind.
    """
    try:
        return RECORD_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown resource kind '{kind}'")


def build_record(kind, mapping):
    """Builds one record of the given kind from a mapping of raw field values.

    Keys of `mapping` that are not fields of the record are ignored, and
    fields missing from `mapping` are None.

    Args:
        kind (str): the resource kind, one of SYSTEMS, LPARS or ADAPTERS.
        mapping (Mapping): raw field values keyed by property name.

    Returns:
        The record, an instance of the record type of `kind`.

    Raises:
        RecordCoercionError: if a value cannot be converted to the type of its
            field or the identifying field is missing.
    """
    record_kind = get_record_kind(kind)
    values = {}
    for field in record_kind.fields:
        raw_value = mapping.get(field.property_name)
        try:
            values[field.property_name] = field.coerce(raw_value)
        except ValueError as err:
            raise RecordCoercionError(
                f"Invalid value '{raw_value}' for field '{field.pretty_name}' "
                f"of {record_kind.pretty_name} '{mapping.get(record_kind.key_field)}': {err}"
            ) from err

    if values[record_kind.key_field] is None:
        raise RecordCoercionError(
            f"{record_kind.pretty_name.capitalize()} is missing its identifying "
            f"field '{record_kind.key_field}'"
        )

    return record_kind.record_type(**values)


def build_records(kind, mappings):
    """Builds records from field mappings, skipping those that cannot be built.

    Args:
        kind (str): the resource kind, one of SYSTEMS, LPARS or ADAPTERS.
        mappings (Iterable): raw field mappings in the order they were found.

    Returns:
        A tuple of (records, skipped) where records is a tuple of records in
        the order of `mappings` and skipped is the number of mappings that
        could not be converted.
    """
    records = []
    skipped = 0
    for mapping in mappings:
        try:
            records.append(build_record(kind, mapping))
        except RecordCoercionError as err:
            LOGGER.warning('Skipping record: %s', err)
            skipped += 1

    if skipped:
        record_kind = get_record_kind(kind)
        LOGGER.warning('Skipped %s %s', skipped,
                       INF.plural(record_kind.pretty_name, skipped))
    return tuple(records), skipped


def record_as_dict(record):
    """Gets a dict of the record's fields in field order."""
    return dict(record._asdict())
