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
Extraction of raw field mappings from HMC responses.

REST responses are Atom feeds whose entries hold one resource each. CLI
responses are the comma-separated lines printed by the HMC listing commands.
"""
from collections import namedtuple
import csv
import logging
import re
import xml.etree.ElementTree as ET

from powerinv.constants import (
    ADAPTERS,
    CLI_COMMANDS,
    CLI_NO_RESULTS,
    CLI_SOURCE,
    LPARS,
    REST_SOURCE,
    SYSTEMS
)

LOGGER = logging.getLogger(__name__)

ExtractionResult = namedtuple('ExtractionResult', ['records', 'skipped'])

# Field tags of each REST resource kind, mapped to record property names.
REST_FIELD_TAGS = {
    SYSTEMS: {
        'SystemName': 'name',
        'SerialNumber': 'serial_number',
        'MachineType': 'machine_type',
        'Model': 'model',
        'State': 'state',
        'SystemFirmware': 'firmware_level',
        'Description': 'description',
        'InstalledSystemMemory': 'total_memory_mb',
        'CurrentAvailableSystemMemory': 'available_memory_mb',
        'InstalledSystemProcessorUnits': 'total_processors',
        'CurrentAvailableSystemProcessorUnits': 'available_processors',
        'AtomID': 'uuid',
    },
    LPARS: {
        'PartitionName': 'name',
        'PartitionID': 'partition_id',
        'LogicalSerialNumber': 'serial_number',
        'Description': 'description',
        'PartitionState': 'state',
        'OperatingSystemVersion': 'os_version',
        'CurrentMemory': 'memory_mb',
        'CurrentMinimumMemory': 'min_memory_mb',
        'CurrentMaximumMemory': 'max_memory_mb',
        'CurrentHasDedicatedProcessors': 'dedicated',
        'CurrentSharingMode': 'processor_sharing',
        'CurrentProcessingUnits': 'processor_units_current',
        'CurrentMinimumProcessingUnits': 'processor_units_min',
        'CurrentMaximumProcessingUnits': 'processor_units_max',
    },
    ADAPTERS: {
        'DynamicReconfigurationConnectorName': 'drc_name',
        'Description': 'description',
        'PhysicalLocation': 'physical_location',
        'PartitionName': 'owning_partition_name',
    },
}
ASSOCIATED_SYSTEM_TAG = 'AssociatedManagedSystem'

# HMC attribute names used in the -F lists of the CLI commands.
CLI_ATTRIBUTES = {
    'name': 'name',
    'serial_num': 'serial_number',
    'type_model': 'type_model',
    'state': 'state',
    'system_firmware': 'firmware_level',
    'lpar_id': 'partition_id',
    'os_version': 'os_version',
    'curr_mem': 'memory_mb',
    'curr_proc_units': 'processor_units_current',
    'drc_name': 'drc_name',
    'description': 'description',
    'phys_loc': 'physical_location',
}

IDENTIFYING_FIELDS = {
    SYSTEMS: 'name',
    LPARS: 'name',
    ADAPTERS: 'drc_name',
}

ENTRY_PATTERN = re.compile(r'<(?:[\w.-]+:)?entry\b.*?</(?:[\w.-]+:)?entry\s*>', re.DOTALL)
UUID_PATTERN = re.compile(r'/([0-9A-Fa-f-]{36})/?$')

# Checked in order, so more specific descriptions are matched first.
ADAPTER_TYPE_PATTERNS = (
    (re.compile(r'fibre channel|fiber channel|\bfc\b', re.IGNORECASE), 'Fibre Channel'),
    (re.compile(r'ethernet|\bnetwork\b|\broce\b', re.IGNORECASE), 'Ethernet'),
    (re.compile(r'\bnvme\b', re.IGNORECASE), 'NVMe'),
    (re.compile(r'\bsas\b|\braid\b', re.IGNORECASE), 'SAS'),
    (re.compile(r'\busb\b', re.IGNORECASE), 'USB'),
)
OTHER_ADAPTER_TYPE = 'Other'


def classify_adapter_type(description):
    """Classifies an adapter from its description.

    Args:
        description (str): the adapter description reported by the HMC.

    Returns:
        str: 'Ethernet', 'Fibre Channel', 'SAS', 'USB', 'NVMe' or 'Other', or
            None if there is no description.
    """
    if not description:
        return None
    for pattern, adapter_type in ADAPTER_TYPE_PATTERNS:
        if pattern.search(description):
            return adapter_type
    return OTHER_ADAPTER_TYPE


def local_name(tag):
    """Gets the tag name of an element without its namespace."""
    return tag.rsplit('}', 1)[-1]


def _find_text(element, tag):
    """Gets the text of the first descendant of `element` with the given local name."""
    for child in element.iter():
        if local_name(child.tag) == tag:
            text = (child.text or '').strip()
            return text or None
    return None


def _find_associated_uuid(element):
    """Gets the UUID at the end of the href of the AssociatedManagedSystem link."""
    for child in element.iter():
        if local_name(child.tag) == ASSOCIATED_SYSTEM_TAG:
            match = UUID_PATTERN.search(child.get('href', '').strip())
            if match:
                return match.group(1).lower()
    return None


def _parse_entries(raw_response):
    """Parses the entries of an Atom feed.

    If the whole document parses, its entries are returned. Otherwise the
    entries are located by pattern and parsed one by one so that a single
    malformed entry does not spoil the others.

    Returns:
        A tuple of (elements, skipped).
    """
    try:
        root = ET.fromstring(raw_response)
    except ET.ParseError as err:
        LOGGER.debug('Response is not well-formed XML (%s); parsing entries individually.', err)
    else:
        if local_name(root.tag) == 'entry':
            return [root], 0
        return [element for element in root.iter() if local_name(element.tag) == 'entry'], 0

    elements = []
    skipped = 0
    for index, fragment in enumerate(ENTRY_PATTERN.findall(raw_response)):
        try:
            elements.append(ET.fromstring(fragment))
        except ET.ParseError as err:
            LOGGER.warning('Skipping entry %s that could not be parsed: %s', index, err)
            skipped += 1
    return elements, skipped


def _processor_mode(dedicated):
    if dedicated is None:
        return None
    return 'dedicated' if dedicated.lower() == 'true' else 'shared'


def _processor_sharing(sharing_mode):
    """Reduces an HMC sharing mode to 'capped' or 'uncapped' when it is one of those."""
    if sharing_mode is None:
        return None
    sharing_mode = sharing_mode.lower()
    if 'uncapped' in sharing_mode:
        return 'uncapped'
    if 'capped' in sharing_mode:
        return 'capped'
    return sharing_mode


def _machine_type_model_serial(machine_type, model, serial):
    if machine_type and model and serial:
        return f'{machine_type}-{model}*{serial}'
    return None


def _normalize_rest_mapping(kind, raw, system_names_by_uuid, associated_uuid):
    """Converts the tag values of one entry to a record field mapping."""
    if kind == SYSTEMS:
        raw['machine_type_model_serial'] = _machine_type_model_serial(
            raw.pop('machine_type'), raw.pop('model'), raw['serial_number']
        )
        if raw['uuid']:
            raw['uuid'] = raw['uuid'].lower()
    elif kind == LPARS:
        raw['processor_mode'] = _processor_mode(raw.pop('dedicated'))
        raw['processor_sharing'] = _processor_sharing(raw['processor_sharing'])
        raw['owning_system_name'] = system_names_by_uuid.get(associated_uuid)
    elif kind == ADAPTERS:
        raw['adapter_type'] = classify_adapter_type(raw['description'])
        raw['owning_system_name'] = system_names_by_uuid.get(associated_uuid)
    return raw


def extract_rest(kind, raw_response, system_names_by_uuid=None):
    """Extracts field mappings from a REST Atom feed.

    Args:
        kind (str): the resource kind, one of SYSTEMS, LPARS or ADAPTERS.
        raw_response (str): the body of the REST response.
        system_names_by_uuid (dict): maps lowercase managed system UUIDs to
            system names, used to resolve the system owning an LPAR or adapter.

    Returns:
        An ExtractionResult of field mappings and the number of skipped entries.
    """
    system_names_by_uuid = system_names_by_uuid or {}
    if not raw_response or not raw_response.strip():
        return ExtractionResult([], 0)

    field_tags = REST_FIELD_TAGS[kind]
    identifying_field = IDENTIFYING_FIELDS[kind]
    entries, skipped = _parse_entries(raw_response)

    mappings = []
    for index, entry in enumerate(entries):
        raw = {prop: _find_text(entry, tag) for tag, prop in field_tags.items()}
        if raw[identifying_field] is None:
            LOGGER.warning("Skipping %s entry %s without '%s'.", kind, index, identifying_field)
            skipped += 1
            continue
        mappings.append(_normalize_rest_mapping(kind, raw, system_names_by_uuid,
                                                _find_associated_uuid(entry)))

    return ExtractionResult(mappings, skipped)


def cli_field_names(kind):
    """Gets the record property names in the order of the -F list of the command."""
    tokens = CLI_COMMANDS[kind].split()
    field_list = tokens[tokens.index('-F') + 1]
    return [CLI_ATTRIBUTES[attribute] for attribute in field_list.split(',')]


def _normalize_cli_mapping(kind, raw, owning_system):
    if kind == SYSTEMS:
        type_model = raw.pop('type_model')
        raw['machine_type_model_serial'] = (
            f'{type_model}*{raw["serial_number"]}'
            if type_model and raw['serial_number'] else None
        )
    elif kind == LPARS:
        raw['owning_system_name'] = owning_system
    elif kind == ADAPTERS:
        raw['adapter_type'] = classify_adapter_type(raw['description'])
        raw['owning_system_name'] = owning_system
    return raw


def extract_cli(kind, raw_response, owning_system=None):
    """Extracts field mappings from the output of a CLI listing command.

    Args:
        kind (str): the resource kind, one of SYSTEMS, LPARS or ADAPTERS.
        raw_response (str): the standard output of the command.
        owning_system (str): the managed system the command listed, if any.

    Returns:
        An ExtractionResult of field mappings and the number of skipped lines.
    """
    field_names = cli_field_names(kind)
    identifying_field = IDENTIFYING_FIELDS[kind]
    lines = [line.strip() for line in (raw_response or '').splitlines()]
    lines = [line for line in lines if line and line != CLI_NO_RESULTS]

    mappings = []
    skipped = 0
    for line_number, line in enumerate(lines, start=1):
        # Each line is read on its own so an unbalanced quote cannot swallow the next line.
        try:
            values = next(csv.reader([line], strict=True))
        except csv.Error as err:
            LOGGER.warning('Skipping %s line %s that could not be parsed (%s): %s',
                           kind, line_number, err, line)
            skipped += 1
            continue

        if len(values) != len(field_names):
            LOGGER.warning('Skipping %s line %s with %s fields instead of %s: %s',
                           kind, line_number, len(values), len(field_names), line)
            skipped += 1
            continue

        raw = {}
        for name, value in zip(field_names, values):
            value = value.strip()
            raw[name] = None if value in ('', 'null') else value

        if raw[identifying_field] is None:
            LOGGER.warning("Skipping %s line %s without '%s'.", kind, line_number, identifying_field)
            skipped += 1
            continue

        mappings.append(_normalize_cli_mapping(kind, raw, owning_system))

    return ExtractionResult(mappings, skipped)


def extract(kind, raw_response, source, system_names_by_uuid=None, owning_system=None):
    """Extracts ordered field mappings from a raw HMC response.

    Extraction never fails as a whole: entries or lines that cannot be read
    are skipped and counted.

    Args:
        kind (str): the resource kind, one of SYSTEMS, LPARS or ADAPTERS.
        raw_response (str): the REST response body or CLI command output.
        source (str): REST_SOURCE or CLI_SOURCE.
        system_names_by_uuid (dict): REST only, see `extract_rest`.
        owning_system (str): CLI only, see `extract_cli`.

    Returns:
        An ExtractionResult.

    Raises:
        ValueError: if `kind` or `source` is unknown.
    """
    if kind not in IDENTIFYING_FIELDS:
        raise ValueError(f"Unknown resource kind '{kind}'")
    if source == REST_SOURCE:
        return extract_rest(kind, raw_response, system_names_by_uuid)
    elif source == CLI_SOURCE:
        return extract_cli(kind, raw_response, owning_system)
    raise ValueError(f"Unknown source '{source}'")


def system_names_by_uuid(system_mappings):
    """Maps the UUIDs of extracted REST managed systems to their names."""
    return {mapping['uuid']: mapping['name']
            for mapping in system_mappings if mapping.get('uuid')}
