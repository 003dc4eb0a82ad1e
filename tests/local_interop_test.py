# Copyright 2026 gRPC authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Conducts interop tests locally."""

import logging
import unittest

import grpc
from grpc.experimental import aio

from interop_client import resources
from tests import _intraop_test_case
from tests import _test_server
from tests._test_base import AioTestBase

_SERVER_HOST_OVERRIDE = "foo.test.google.fr"


def _has_test_root_certificates():
    try:
        resources.test_root_certificates()
    except OSError:
        return False
    return True


class InsecureLocalInteropTest(
    _intraop_test_case.InteropTestCaseMixin, AioTestBase
):
    async def setUp(self):
        address, self._server = await _test_server.start_test_server()
        self._channel = aio.insecure_channel(address)

    async def tearDown(self):
        await self._channel.close()
        await self._server.stop(None)


@unittest.skipUnless(
    _has_test_root_certificates() and _test_server.has_server_credentials(),
    "interop test credentials are not available",
)
class SecureLocalInteropTest(
    _intraop_test_case.InteropTestCaseMixin, AioTestBase
):
    async def setUp(self):
        channel_credentials = grpc.ssl_channel_credentials(
            resources.test_root_certificates()
        )
        channel_options = (
            (
                "grpc.ssl_target_name_override",
                _SERVER_HOST_OVERRIDE,
            ),
        )

        address, self._server = await _test_server.start_test_server(
            secure=True, server_credentials=_test_server.server_credentials()
        )
        self._channel = aio.secure_channel(
            address, channel_credentials, channel_options
        )

    async def tearDown(self):
        await self._channel.close()
        await self._server.stop(None)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    unittest.main(verbosity=2)
