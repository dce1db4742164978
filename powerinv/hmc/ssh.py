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
Command sessions with an HMC over SSH.
"""
from concurrent.futures import ThreadPoolExecutor
import logging
import socket

from paramiko import RejectPolicy, SSHClient, WarningPolicy
from paramiko.ssh_exception import (
    AuthenticationException,
    BadHostKeyException,
    SSHException
)

from powerinv.constants import CLI_NO_RESULTS, PROBE_COMMAND
from powerinv.hmc.errors import (
    AuthError,
    HMCCommandError,
    INVALID_CREDENTIALS,
    NETWORK_UNREACHABLE,
    TIMEOUT,
    TLS_VALIDATION_FAILED
)

LOGGER = logging.getLogger(__name__)

# Message fragment of the SSHException raised by RejectPolicy for an unknown host key.
UNKNOWN_HOST_KEY_MESSAGE = 'known_hosts'


def read_streams(stdout, stderr):
    """Reads the standard output and standard error of a remote command.

    The streams are read at the same time, since a command writing more to
    one stream than its channel window holds blocks until that stream is read.

    Returns:
        A tuple of the bytes read from stdout and from stderr.
    """
    with ThreadPoolExecutor(max_workers=1) as executor:
        error_output = executor.submit(stderr.read)
        output = stdout.read()
        return output, error_output.result()


def get_ssh_client(validate_certs=True):
    """Get a paramiko SSH client.

    Args:
        validate_certs (bool): if True, unknown host keys are rejected.
            Otherwise they are accepted with a warning.

    Returns:
        A paramiko.SSHClient instance with the system host keys loaded.
    """
    ssh_client = SSHClient()
    ssh_client.load_system_host_keys()
    ssh_client.set_missing_host_key_policy(RejectPolicy if validate_certs else WarningPolicy)
    return ssh_client


class HMCShell:
    """A validated SSH connection to one HMC for running its commands.

    Use as a context manager: entering connects and runs a probe command,
    exiting closes the connection.
    """

    def __init__(self, host, port, username, password, validate_certs=True, timeout=60):
        """Create a new HMCShell.

        Args:
            host (str): the HMC host name or address.
            port (int): the SSH port.
            username (str): the HMC user.
            password (str): the password of the HMC user.
            validate_certs (bool): whether to reject unknown host keys.
            timeout (int): seconds to wait for the connection and each command.
        """
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.validate_certs = validate_certs
        self.timeout = timeout
        self.ssh_client = None

    def connect(self):
        """Connects to the HMC and checks that it can run commands.

        Raises:
            AuthError: if the connection or the probe command fails.
        """
        self.ssh_client = get_ssh_client(self.validate_certs)
        LOGGER.debug('Connecting to HMC %s on port %s as user %s',
                     self.host, self.port, self.username)
        try:
            self.ssh_client.connect(
                self.host, port=self.port, username=self.username, password=self.password,
                timeout=self.timeout, banner_timeout=self.timeout, auth_timeout=self.timeout,
                look_for_keys=False, allow_agent=False
            )
        except AuthenticationException as err:
            self.close()
            raise AuthError(self.host, INVALID_CREDENTIALS, str(err)) from err
        except BadHostKeyException as err:
            self.close()
            raise AuthError(self.host, TLS_VALIDATION_FAILED, str(err)) from err
        except SSHException as err:
            self.close()
            reason = (TLS_VALIDATION_FAILED if UNKNOWN_HOST_KEY_MESSAGE in str(err)
                      else NETWORK_UNREACHABLE)
            raise AuthError(self.host, reason, str(err)) from err
        except socket.timeout as err:
            self.close()
            raise AuthError(self.host, TIMEOUT, str(err)) from err
        except socket.error as err:
            self.close()
            raise AuthError(self.host, NETWORK_UNREACHABLE, str(err)) from err

        try:
            version = self.run(PROBE_COMMAND)
        except HMCCommandError as err:
            self.close()
            reason = TIMEOUT if isinstance(err.__cause__, socket.timeout) else NETWORK_UNREACHABLE
            raise AuthError(self.host, reason, f'probe command failed: {err}') from err

        LOGGER.info('Connected to HMC %s', self.host)
        LOGGER.debug('HMC %s version: %s', self.host, version.strip())

    def close(self):
        if self.ssh_client is not None:
            self.ssh_client.close()
            self.ssh_client = None

    def run(self, command):
        """Runs a command on the HMC.

        Args:
            command (str): the command line to run.

        Returns:
            str: the standard output of the command. Empty if the HMC reported
                that there were no results.

        Raises:
            HMCCommandError: if the command cannot be run, times out or exits
                with a non-zero status.
        """
        if self.ssh_client is None:
            raise HMCCommandError(f'Not connected to HMC {self.host}')

        LOGGER.debug('Executing command on HMC %s: `%s`', self.host, command)
        try:
            _, stdout, stderr = self.ssh_client.exec_command(command, timeout=self.timeout)
            output, error_output = read_streams(stdout, stderr)
            output = output.decode('utf-8', errors='replace')
            error_output = error_output.decode('utf-8', errors='replace')
            exit_status = stdout.channel.recv_exit_status()
        except (SSHException, socket.error) as err:
            raise HMCCommandError(
                f'Command `{command}` failed on HMC {self.host}: {err}'
            ) from err

        if CLI_NO_RESULTS in (output.strip(), error_output.strip()):
            return ''
        if exit_status != 0:
            raise HMCCommandError(
                f'Command `{command}` failed on HMC {self.host} with exit status '
                f'{exit_status}: {error_output.strip() or output.strip()}'
            )
        return output

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
