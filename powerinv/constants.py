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
Constants used throughout powerinv.
"""

# Resource kinds that can be collected from an HMC
SYSTEMS = 'systems'
LPARS = 'lpars'
ADAPTERS = 'adapters'
RESOURCE_KINDS = (SYSTEMS, LPARS, ADAPTERS)

# Ways of talking to an HMC
REST_SOURCE = 'rest'
CLI_SOURCE = 'cli'
SOURCES = (REST_SOURCE, CLI_SOURCE)

# Output formats and the file extension used for each
REPORT_FORMATS = ('json', 'csv', 'yaml', 'html')
FORMAT_EXTENSIONS = {
    'json': 'json',
    'csv': 'csv',
    'yaml': 'yml',
    'html': 'html',
}

# Persistence destinations
DESTINATIONS = ('local', 'aap', 's3', 'git')

# Report file naming
REPORT_FILE_PREFIXES = {
    REST_SOURCE: 'power_infrastructure',
    CLI_SOURCE: 'power_infrastructure_cli',
}
REPORT_TIMESTAMP_FORMAT = '%Y-%m-%d_%H-%M-%S'

# REST API paths on the HMC
LOGON_PATH = '/rest/api/web/Logon'
REST_RESOURCE_PATHS = {
    SYSTEMS: '/rest/api/uom/ManagedSystem',
    LPARS: '/rest/api/uom/LogicalPartition',
    ADAPTERS: '/rest/api/uom/IOAdapter',
}
REST_CONTENT_TYPES = {
    SYSTEMS: 'ManagedSystem',
    LPARS: 'LogicalPartition',
    ADAPTERS: 'IOAdapter',
}
DEFAULT_HMC_REST_PORT = 12443

# HMC commands run over SSH
PROBE_COMMAND = 'lshmc -V'
CLI_COMMANDS = {
    SYSTEMS: 'lssyscfg -r sys -F name,serial_num,type_model,state,system_firmware',
    LPARS: 'lssyscfg -r lpar -F name,lpar_id,serial_num,state,os_version,curr_mem,curr_proc_units',
    ADAPTERS: 'lshwres -r io --rsubtype slot -F drc_name,description,phys_loc',
}
# The resource kinds whose listing needs a target managed system
PER_SYSTEM_KINDS = (LPARS, ADAPTERS)
CLI_NO_RESULTS = 'No results were found.'

# Placeholders used in summaries
UNKNOWN_VALUE = 'Unknown'
NOT_APPLICABLE = 'N/A'
