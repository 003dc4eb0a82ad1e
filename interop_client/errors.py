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
"""Exceptions raised by the interoperability test client.

Behavioral mismatches observed on the wire are reported as plain ValueErrors
by the test methods, and unexpected RPC failures propagate as the RpcErrors
raised by gRPC itself. The classes below cover the remaining failures: the
ones caused by how a test was configured or by the credential sources it
depends on.
"""


class InteropError(Exception):
    """Base class for errors raised by the interop client itself."""


class UnknownTestCaseError(InteropError, ValueError):
    """Raised when a test case name is not registered in the catalog."""

    def __init__(self, test_case):
        super().__init__(f'No test case "{test_case}"!')
        self.test_case = test_case


class ConfigurationError(InteropError, ValueError):
    """Raised when a test case cannot run with the supplied parameters."""


class CredentialResolutionError(InteropError):
    """Raised when the credentials required by a test case cannot be obtained.

    The error raised by the underlying identity source is chained as
    __cause__.
    """

    def __init__(self, test_case, error):
        super().__init__(
            f'Failed to resolve credentials for test case "{test_case}": '
            f"{error!r}"
        )
        self.test_case = test_case
