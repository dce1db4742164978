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
Persistence of rendered reports to S3 object storage.
"""
import logging
import threading

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

from powerinv.config import get_config_value
from powerinv.persistence.base import Destination, PersistenceError, report_file_name
from powerinv.util import get_s3_resource, S3ResourceCreationError

LOGGER = logging.getLogger(__name__)

CONTENT_TYPES = {
    'json': 'application/json',
    'csv': 'text/csv',
    'yaml': 'application/yaml',
    'html': 'text/html',
}


class S3Destination(Destination):
    """Uploads reports to the configured S3 bucket.

    Reports of several HMCs may be stored from different threads at once.
    boto3 resources must not be shared between threads, so uploads go through
    the low-level client of the resource, which may be.
    """

    name = 's3'

    def __init__(self, bucket=None, prefix=None):
        self.bucket_name = bucket or get_config_value('s3.bucket')
        self.prefix = (get_config_value('s3.prefix') if prefix is None else prefix).strip('/')
        self._client = None
        self._lock = threading.Lock()

    @property
    def client(self):
        """The boto3 S3 client, created on first use.

        Raises:
            PersistenceError: if the S3 resource cannot be created.
        """
        with self._lock:
            if self._client is None:
                try:
                    self._client = get_s3_resource().meta.client
                except S3ResourceCreationError as err:
                    raise PersistenceError(str(err)) from err
            return self._client

    def object_key(self, file_name):
        return f'{self.prefix}/{file_name}' if self.prefix else file_name

    def store(self, identifier, fmt, data):
        key = self.object_key(report_file_name(identifier, fmt))
        location = f's3://{self.bucket_name}/{key}'
        LOGGER.debug('Uploading %s report to %s', fmt, location)
        try:
            self.client.put_object(
                Bucket=self.bucket_name, Key=key, Body=data,
                ContentType=CONTENT_TYPES.get(fmt, 'application/octet-stream')
            )
        except (BotoCoreError, ClientError, Boto3Error) as err:
            raise PersistenceError(f'Failed to upload {location}: {err}') from err
        LOGGER.info('Uploaded %s report to %s', fmt, location)
        return location
