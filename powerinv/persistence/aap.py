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
Persistence of rendered reports as Ansible Automation Platform job artifacts.
"""
import json
import logging
import os
import threading

from powerinv.config import get_config_value
from powerinv.persistence.base import Destination, PersistenceError, report_file_name
from powerinv.persistence.local import write_report_file
from powerinv.util import json_dump

LOGGER = logging.getLogger(__name__)

ARTIFACT_INDEX_FILE_NAME = 'power_infrastructure_artifacts.json'
ARTIFACT_INDEX_KEY = 'power_infrastructure_reports'


class AAPDestination(Destination):
    """Registers reports as job artifacts in the artifact directory.

    Each report is written to the artifact directory and its text is merged
    into an index file of all reports, keyed by file name.
    """

    name = 'aap'

    def __init__(self, artifact_dir=None, max_artifact_bytes=None):
        self.artifact_dir = artifact_dir or get_config_value('aap.artifact_dir')
        self.max_artifact_bytes = (max_artifact_bytes if max_artifact_bytes is not None
                                   else get_config_value('aap.max_artifact_bytes'))
        self.index_path = os.path.join(self.artifact_dir, ARTIFACT_INDEX_FILE_NAME)
        self._lock = threading.Lock()

    def _load_index(self):
        try:
            with open(self.index_path) as f:
                index = json.load(f)
        except FileNotFoundError:
            return {ARTIFACT_INDEX_KEY: {}}
        except (OSError, ValueError) as err:
            raise PersistenceError(f'Unable to read artifact index {self.index_path}: {err}') from err

        if not isinstance(index, dict) or not isinstance(index.get(ARTIFACT_INDEX_KEY, {}), dict):
            raise PersistenceError(f'Artifact index {self.index_path} is malformed')
        index.setdefault(ARTIFACT_INDEX_KEY, {})
        return index

    def store(self, identifier, fmt, data):
        file_name = report_file_name(identifier, fmt)
        if len(data) > self.max_artifact_bytes:
            raise PersistenceError(
                f'{file_name} is {len(data)} bytes, more than the artifact limit '
                f'of {self.max_artifact_bytes} bytes'
            )
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as err:
            raise PersistenceError(f'{file_name} is not valid UTF-8: {err}') from err

        path = write_report_file(self.artifact_dir, file_name, data)
        with self._lock:
            index = self._load_index()
            index[ARTIFACT_INDEX_KEY][file_name] = text
            try:
                with open(self.index_path, 'w') as f:
                    f.write(json_dump(index))
            except OSError as err:
                raise PersistenceError(
                    f'Unable to write artifact index {self.index_path}: {err}'
                ) from err

        LOGGER.info('Registered %s report as job artifact %s', fmt, path)
        return path
