#!/usr/bin/env python3
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
Print the version of the newest release listed in a "Keep a Changelog"
formatted CHANGELOG.md. setup.py imports get_latest_version_from_file to
version the package.
"""

import argparse
import logging
import re
import sys

# A release heading, e.g. "## [1.2.0] - 2026-10-18". "## [Unreleased]" is not one.
RELEASE_HEADING_RE = re.compile(
    r'^## \[(?P<version>\d+\.\d+\.\d+)\]\s-\s(?P<date>\d{4}-\d{2}-\d{2})\s*$'
)


def parse_release_heading(line):
    """Get the (version, date) of a release heading line, or None for other lines."""
    match = RELEASE_HEADING_RE.match(line)
    if match is None:
        return None
    return match.group('version'), match.group('date')


def get_latest_version_from_file(file_path):
    """Get the version of the first release heading in a changelog.

    Returns:
        The version string, or None if the changelog lists no release.

    Raises:
        OSError: if the file cannot be read.
    """
    with open(file_path) as changelog:
        for line in changelog:
            release = parse_release_heading(line)
            if release is not None:
                return release[0]

    logging.error("No version number found in changelog '%s'", file_path)
    return None


def main():
    parser = argparse.ArgumentParser(
        description='Print the latest released version of powerinv from its changelog.'
    )
    parser.add_argument('changelog_file', nargs='?', default='CHANGELOG.md',
                        help='The changelog to read. Defaults to CHANGELOG.md.')
    args = parser.parse_args()

    try:
        version = get_latest_version_from_file(args.changelog_file)
    except OSError as err:
        logging.error("Unable to read changelog '%s': %s", args.changelog_file, err)
        sys.exit(1)

    if version is None:
        sys.exit(1)
    print(version)


if __name__ == '__main__':
    main()
