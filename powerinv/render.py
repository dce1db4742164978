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
Rendering of infrastructure reports to JSON, CSV, YAML and HTML.
"""
import csv
import io
import logging

from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment
from yaml import YAMLError

from powerinv.constants import ADAPTERS, LPARS, REPORT_FORMATS, SYSTEMS
from powerinv.records import RECORD_KINDS
from powerinv.report import report_as_dict
from powerinv.util import json_dump, yaml_dump

LOGGER = logging.getLogger(__name__)

ENCODING = 'utf-8'
CSV_SECTIONS = (SYSTEMS, LPARS, ADAPTERS)
REPORT_ATTRIBUTES = {
    SYSTEMS: 'managed_systems',
    LPARS: 'lpars',
    ADAPTERS: 'adapters',
}

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Power infrastructure report: {{ report.hmc_identifier }}</title>
<style>
body { font-family: sans-serif; margin: 2em; }
table { border-collapse: collapse; margin-bottom: 2em; }
th, td { border: 1px solid #999; padding: 0.3em 0.6em; text-align: left; }
th { background: #e8e8e8; }
.warnings li { color: #9a4d00; }
</style>
</head>
<body>
<h1>Power infrastructure report: {{ report.hmc_identifier }}</h1>
<p>Collected {{ report.collection_timestamp }} through {{ report.source | upper }}.</p>

<h2>Summary</h2>
<table>
<tr><th>Managed systems</th><td>{{ summary.total_systems }}</td></tr>
<tr><th>Logical partitions</th><td>{{ summary.total_lpars }}</td></tr>
<tr><th>Adapters</th><td>{{ summary.total_adapters }}</td></tr>
<tr><th>Assigned adapters</th><td>{{ summary.assigned_adapter_count }}</td></tr>
<tr><th>Unassigned adapters</th><td>{{ summary.unassigned_adapter_count }}</td></tr>
<tr><th>Skipped records</th><td>{{ report.skipped_record_count }}</td></tr>
</table>

<h3>Utilization</h3>
<table>
<tr><th>System</th><th>Total Memory (MB)</th><th>Used Memory (MB)</th><th>Memory Utilization (%)</th>
<th>Total Processors</th><th>Used Processors</th><th>Processor Utilization (%)</th></tr>
{% for u in summary.system_utilization %}
<tr><td>{{ u.name }}</td><td>{{ u.total_memory_mb | cell }}</td><td>{{ u.memory_used_mb | cell }}</td>
<td>{{ u.memory_utilization_pct | cell }}</td><td>{{ u.total_processors | cell }}</td>
<td>{{ u.processors_used | cell }}</td><td>{{ u.processor_utilization_pct | cell }}</td></tr>
{% endfor %}
<tr><th>All systems</th><td>{{ aggregate.total_memory_mb | cell }}</td><td>{{ aggregate.memory_used_mb | cell }}</td>
<td>{{ aggregate.memory_utilization_pct | cell }}</td><td>{{ aggregate.total_processors | cell }}</td>
<td>{{ aggregate.processors_used | cell }}</td><td>{{ aggregate.processor_utilization_pct | cell }}</td></tr>
</table>

<h3>Logical partitions by state</h3>
<table>
{% for state, count in summary.lpars_by_state.items() %}
<tr><th>{{ state }}</th><td>{{ count }}</td></tr>
{% endfor %}
</table>

<h3>Logical partitions by processor classification</h3>
<table>
{% for label, count in summary.lpars_by_processor_classification.items() %}
<tr><th>{{ label }}</th><td>{{ count }}</td></tr>
{% endfor %}
</table>

<h3>Unassigned adapters</h3>
<ul>
{% for drc_name in summary.unassigned_adapters %}
<li>{{ drc_name }}</li>
{% else %}
<li>None</li>
{% endfor %}
</ul>

{% for section in sections %}
<h2>{{ section.title }}</h2>
<table>
<tr>{% for heading in section.headings %}<th>{{ heading }}</th>{% endfor %}</tr>
{% for row in section.rows %}
<tr>{% for value in row %}<td>{{ value | cell }}</td>{% endfor %}</tr>
{% endfor %}
</table>
{% endfor %}

<h2>Integrity warnings</h2>
<ul class="warnings">
{% for warning in report.integrity_warnings %}
<li>{{ warning }}</li>
{% else %}
<li>None</li>
{% endfor %}
</ul>
</body>
</html>
"""

HTML_SECTION_TITLES = {
    SYSTEMS: 'Managed systems',
    LPARS: 'Logical partitions',
    ADAPTERS: 'Adapters',
}


class RenderError(Exception):
    """A report could not be rendered in a format."""
    pass


def cell_text(value):
    """Gets the text of a record value in a table cell.

    None is rendered empty, and decimals keep the text they were read with.
    """
    if value is None:
        return ''
    return str(value)


def _record_rows(report, kind):
    fields = RECORD_KINDS[kind].fields
    records = getattr(report, REPORT_ATTRIBUTES[kind])
    rows = [[getattr(record, f.property_name) for f in fields] for record in records]
    return fields, rows


def render_json(report):
    return json_dump(report_as_dict(report), ensure_ascii=False).encode(ENCODING)


def render_yaml(report):
    return yaml_dump(report_as_dict(report)).encode(ENCODING)


def render_csv(report):
    """Renders the record fields of a report as CSV.

    Systems, LPARs and adapters each get a section made of a header row and
    one row per record. Sections are separated by an empty line.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    for index, kind in enumerate(CSV_SECTIONS):
        if index:
            writer.writerow([])
        fields, rows = _record_rows(report, kind)
        writer.writerow([f.property_name for f in fields])
        for row in rows:
            writer.writerow([cell_text(value) for value in row])
    return output.getvalue().encode(ENCODING)


def render_html(report):
    env = SandboxedEnvironment(autoescape=True)
    env.filters['cell'] = cell_text
    template = env.from_string(HTML_TEMPLATE)

    sections = []
    for kind in CSV_SECTIONS:
        fields, rows = _record_rows(report, kind)
        sections.append({
            'title': HTML_SECTION_TITLES[kind],
            'headings': [f.pretty_name for f in fields],
            'rows': rows,
        })

    return template.render(
        report=report,
        summary=report.summary,
        aggregate=report.summary.aggregate_utilization,
        sections=sections,
    ).encode(ENCODING)


RENDERERS = {
    'json': render_json,
    'csv': render_csv,
    'yaml': render_yaml,
    'html': render_html,
}


def render(report, fmt):
    """Renders a report in one format.

    Args:
        report (InfrastructureReport): the report to render.
        fmt (str): one of 'json', 'csv', 'yaml' or 'html'.

    Returns:
        bytes: the UTF-8 encoded rendering.

    Raises:
        RenderError: if the format is unknown or rendering fails.
    """
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise RenderError(f"Unknown report format '{fmt}'; valid formats are: "
                          f"{', '.join(REPORT_FORMATS)}")
    try:
        return renderer(report)
    except (TypeError, ValueError, csv.Error, YAMLError, TemplateError) as err:
        raise RenderError(f'Unable to render report of HMC {report.hmc_identifier} '
                          f'as {fmt}: {err}') from err


def render_all(report, formats):
    """Renders a report in each of the given formats.

    A failure in one format does not prevent rendering the others.

    Returns:
        A tuple (rendered, failures) where rendered maps each format that
        succeeded to its bytes, and failures maps each format that failed to
        its RenderError.
    """
    rendered = {}
    failures = {}
    for fmt in formats:
        try:
            rendered[fmt] = render(report, fmt)
        except RenderError as err:
            LOGGER.error('%s', err)
            failures[fmt] = err
    return rendered, failures
