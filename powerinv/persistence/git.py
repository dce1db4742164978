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
Persistence of rendered reports to a Git repository.
"""
import logging
import os
import subprocess
import threading

import inflect

from powerinv.config import get_config_value
from powerinv.persistence.base import Destination, PersistenceError, report_file_name
from powerinv.persistence.local import write_report_file

LOGGER = logging.getLogger(__name__)

INF = inflect.engine()


class GitDestination(Destination):
    """Commits reports to a Git repository.

    Reports are written to the working tree and staged as they are stored.
    They are committed, and pushed if configured, by `finalize`.
    """

    name = 'git'

    def __init__(self, repo_path=None, subdirectory=None):
        """Create a new GitDestination.

        Raises:
            PersistenceError: if no repository is configured.
        """
        self.repo_path = repo_path or get_config_value('git.repo_path')
        if not self.repo_path:
            raise PersistenceError("No Git repository configured; set 'repo_path' "
                                   "in the 'git' section of the configuration file.")
        self.subdirectory = (get_config_value('git.subdirectory')
                             if subdirectory is None else subdirectory)
        self.staged = []
        self._lock = threading.Lock()

    def run_git_cmd(self, *args):
        """Runs a git command in the repository.

        Returns:
            subprocess.CompletedProcess: the completed process

        Raises:
            PersistenceError: if the command fails
        """
        git_cmd = ['git', '-C', self.repo_path] + list(args)
        LOGGER.debug('Running git command: %s', ' '.join(git_cmd))
        try:
            return subprocess.run(git_cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                                  check=True, universal_newlines=True)
        except subprocess.CalledProcessError as err:
            raise PersistenceError(
                f"Git command '{' '.join(args)}' failed in {self.repo_path}: "
                f"{err.stderr.strip() if err.stderr else err}"
            ) from err
        except OSError as err:
            raise PersistenceError(f'Unable to run git: {err}') from err

    def store(self, identifier, fmt, data):
        file_name = report_file_name(identifier, fmt)
        relative_path = os.path.join(self.subdirectory, file_name) if self.subdirectory else file_name
        with self._lock:
            write_report_file(os.path.join(self.repo_path, self.subdirectory), file_name, data)
            self.run_git_cmd('add', '--', relative_path)
            self.staged.append(relative_path)
        LOGGER.info('Staged %s report %s in %s', fmt, relative_path, self.repo_path)
        return os.path.join(self.repo_path, relative_path)

    def finalize(self):
        with self._lock:
            if not self.staged:
                LOGGER.debug('No reports staged in %s; nothing to commit.', self.repo_path)
                return

            message = 'Add {} power infrastructure {}'.format(
                len(self.staged), INF.plural('report', len(self.staged))
            )
            self.run_git_cmd(
                '-c', f'user.name={get_config_value("git.author_name")}',
                '-c', f'user.email={get_config_value("git.author_email")}',
                'commit', '-m', message, '--', *self.staged
            )
            LOGGER.info('Committed %s in %s', INF.no('report', len(self.staged)), self.repo_path)
            self.staged = []

            if get_config_value('git.push'):
                remote = get_config_value('git.remote')
                branch = get_config_value('git.branch')
                self.run_git_cmd('push', remote, f'HEAD:{branch}')
                LOGGER.info('Pushed reports to %s %s', remote, branch)
