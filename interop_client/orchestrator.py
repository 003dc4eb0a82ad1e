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
"""Runs a single interoperability test case against a server."""

import logging
from typing import Any, Mapping, Optional

from grpc.experimental import aio

from interop_client import catalog
from interop_client import credentials
from interop_client import errors
from interop_client import methods
from interop_client.schema import test_pb2_grpc

_LOGGER = logging.getLogger(__name__)

_STUB_FACTORIES = {
    catalog.ClientCapability.TEST_SERVICE: test_pb2_grpc.TestServiceStub,
    catalog.ClientCapability.UNIMPLEMENTED_SERVICE: (
        test_pb2_grpc.UnimplementedServiceStub
    ),
}


def create_stub(channel: aio.Channel, capability: catalog.ClientCapability):
    try:
        stub_factory = _STUB_FACTORIES[capability]
    except KeyError:
        raise ValueError(f"Unknown client capability {capability}") from None
    return stub_factory(channel)


def create_channel(target, channel_credentials, options) -> aio.Channel:
    if channel_credentials is None:
        return aio.insecure_channel(target)
    return aio.secure_channel(target, channel_credentials, options)


def _merge_params(
    descriptor: catalog.TestCaseDescriptor, extra: Optional[Mapping[str, Any]]
) -> Mapping[str, Any]:
    params = dict(descriptor.extra_params)
    for key, value in (extra or {}).items():
        if value is not None:
            params[key] = value
    return params


async def run_test(
    test_catalog: catalog.TestCatalog,
    address: str,
    server_host_override: Optional[str],
    test_case: str,
    use_tls: bool,
    use_test_ca: bool,
    extra: Optional[Mapping[str, Any]] = None,
) -> None:
    """Runs one test case to completion.

    Args:
      test_catalog: The catalog the test case is looked up in.
      address: The server address, as host:port.
      server_host_override: If set, the name claimed for TLS host name
        checking and sent as the default authority.
      test_case: The name of the test case to run.
      use_tls: Whether to connect over TLS.
      use_test_ca: Whether to trust the bundled test CA instead of the
        platform roots.
      extra: Parameters for the test case, overlaying its defaults. Keys
        with a None value are ignored.

    Raises:
      UnknownTestCaseError: If test_case is not in the catalog.
      ConfigurationError: If the test case cannot run with these parameters.
      CredentialResolutionError: If the test case's credentials could not be
        obtained. No RPC is attempted in that case.
      Any error raised by the test method, which signals that the client
        did not behave as expected.
    """
    descriptor = test_catalog.lookup(test_case)
    params = _merge_params(descriptor, extra)
    channel_credentials, options = credentials.get_channel_parameters(
        use_tls, use_test_ca, server_host_override
    )

    if descriptor.credential_resolver is not None:
        if channel_credentials is None:
            raise errors.ConfigurationError(
                f'Test case "{test_case}" requires use_tls'
            )
        _LOGGER.debug("Resolving credentials for %s.", test_case)
        try:
            call_credentials = await descriptor.credential_resolver(params)
        except Exception as error:  # pylint: disable=broad-except
            raise errors.CredentialResolutionError(test_case, error) from error
        channel_credentials = credentials.combine(
            channel_credentials, call_credentials
        )

    _LOGGER.info("Running %s against %s.", test_case, address)
    channel = create_channel(address, channel_credentials, options)
    try:
        stub = create_stub(channel, descriptor.client_capability)
        await methods.test_interoperability(descriptor.method, stub, params)
    finally:
        await channel.close()
    _LOGGER.info("Finished %s.", test_case)
