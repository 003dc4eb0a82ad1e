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
"""The registry of interoperability test cases."""

import collections.abc
import dataclasses
import enum
import types
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

from interop_client import credentials
from interop_client import errors
from interop_client import methods


@enum.unique
class ClientCapability(enum.Enum):
    """The service a test case's client stub is built for."""

    TEST_SERVICE = "grpc.testing.TestService"
    UNIMPLEMENTED_SERVICE = "grpc.testing.UnimplementedService"


@enum.unique
class TestCase(enum.Enum):
    EMPTY_UNARY = "empty_unary"
    LARGE_UNARY = "large_unary"
    SERVER_STREAMING = "server_streaming"
    CLIENT_STREAMING = "client_streaming"
    PING_PONG = "ping_pong"
    CANCEL_AFTER_BEGIN = "cancel_after_begin"
    CANCEL_AFTER_FIRST_RESPONSE = "cancel_after_first_response"
    TIMEOUT_ON_SLEEPING_SERVER = "timeout_on_sleeping_server"
    EMPTY_STREAM = "empty_stream"
    STATUS_CODE_AND_MESSAGE = "status_code_and_message"
    UNIMPLEMENTED_METHOD = "unimplemented_method"
    UNIMPLEMENTED_SERVICE = "unimplemented_service"
    CUSTOM_METADATA = "custom_metadata"
    COMPUTE_ENGINE_CREDS = "compute_engine_creds"
    SERVICE_ACCOUNT_CREDS = "service_account_creds"
    OAUTH2_AUTH_TOKEN = "oauth2_auth_token"
    JWT_TOKEN_CREDS = "jwt_token_creds"
    PER_RPC_CREDS = "per_rpc_creds"
    SPECIAL_STATUS_MESSAGE = "special_status_message"


@dataclasses.dataclass(frozen=True)
class TestCaseDescriptor:
    """Everything needed to run one test case.

    Attributes:
      name: The name the test case is selected by.
      method: The coroutine function exercising the client stub.
      client_capability: The service the client stub is built for.
      credential_resolver: If set, resolves call credentials that are
        combined into the channel credentials before the stub is built.
      extra_params: Default parameters for the method, overridable by the
        caller.
    """

    name: str
    method: Callable
    client_capability: ClientCapability = ClientCapability.TEST_SERVICE
    credential_resolver: Optional[credentials.CredentialResolver] = None
    extra_params: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self, "extra_params", types.MappingProxyType(dict(self.extra_params))
        )


class TestCatalog(collections.abc.Mapping):
    """A read-only mapping from test case names to their descriptors.

    Indexing follows the Mapping protocol and raises KeyError for an unknown
    name. Callers resolving a user-supplied name should use lookup, which
    raises UnknownTestCaseError instead.
    """

    def __init__(self, descriptors: Iterable[TestCaseDescriptor]):
        registry = {}
        for descriptor in descriptors:
            if descriptor.name in registry:
                raise ValueError(
                    f'Test case "{descriptor.name}" registered twice!'
                )
            registry[descriptor.name] = descriptor
        self._registry = types.MappingProxyType(registry)

    def __getitem__(self, name: str) -> TestCaseDescriptor:
        return self._registry[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)

    def lookup(self, name: str) -> TestCaseDescriptor:
        try:
            return self._registry[name]
        except KeyError:
            raise errors.UnknownTestCaseError(name) from None


def _descriptor(test_case, method, **kwargs):
    return TestCaseDescriptor(name=test_case.value, method=method, **kwargs)


def default_catalog() -> TestCatalog:
    """Builds the catalog of every supported interop test case."""
    return TestCatalog(
        (
            _descriptor(TestCase.EMPTY_UNARY, methods.empty_unary),
            _descriptor(TestCase.LARGE_UNARY, methods.large_unary),
            _descriptor(TestCase.SERVER_STREAMING, methods.server_streaming),
            _descriptor(TestCase.CLIENT_STREAMING, methods.client_streaming),
            _descriptor(TestCase.PING_PONG, methods.ping_pong),
            _descriptor(
                TestCase.CANCEL_AFTER_BEGIN, methods.cancel_after_begin
            ),
            _descriptor(
                TestCase.CANCEL_AFTER_FIRST_RESPONSE,
                methods.cancel_after_first_response,
            ),
            _descriptor(
                TestCase.TIMEOUT_ON_SLEEPING_SERVER,
                methods.timeout_on_sleeping_server,
                extra_params={
                    "timeout_s": methods.DEFAULT_SLEEPING_SERVER_TIMEOUT_S
                },
            ),
            _descriptor(TestCase.EMPTY_STREAM, methods.empty_stream),
            _descriptor(
                TestCase.STATUS_CODE_AND_MESSAGE,
                methods.status_code_and_message,
            ),
            _descriptor(
                TestCase.UNIMPLEMENTED_METHOD, methods.unimplemented_method
            ),
            _descriptor(
                TestCase.UNIMPLEMENTED_SERVICE,
                methods.unimplemented_service,
                client_capability=ClientCapability.UNIMPLEMENTED_SERVICE,
            ),
            _descriptor(TestCase.CUSTOM_METADATA, methods.custom_metadata),
            _descriptor(
                TestCase.COMPUTE_ENGINE_CREDS,
                methods.compute_engine_creds,
                credential_resolver=credentials.application_default_credentials,
            ),
            _descriptor(
                TestCase.SERVICE_ACCOUNT_CREDS,
                methods.service_account_creds,
                credential_resolver=credentials.application_default_credentials,
            ),
            _descriptor(
                TestCase.OAUTH2_AUTH_TOKEN,
                methods.oauth2_auth_token,
                credential_resolver=credentials.oauth2_access_token_credentials,
            ),
            _descriptor(
                TestCase.JWT_TOKEN_CREDS,
                methods.jwt_token_creds,
                credential_resolver=credentials.jwt_token_credentials,
            ),
            _descriptor(TestCase.PER_RPC_CREDS, methods.per_rpc_creds),
            _descriptor(
                TestCase.SPECIAL_STATUS_MESSAGE,
                methods.special_status_message,
            ),
        )
    )
