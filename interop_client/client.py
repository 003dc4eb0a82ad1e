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
"""The Python implementation of the GRPC interoperability test client."""

import argparse
import asyncio
import logging

from interop_client import catalog
from interop_client import orchestrator
from interop_client import resources


def parse_interop_client_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--server_host",
        default="localhost",
        type=str,
        help="the host to which to connect",
    )
    parser.add_argument(
        "--server_port",
        type=int,
        required=True,
        help="the port to which to connect",
    )
    parser.add_argument(
        "--test_case",
        default="large_unary",
        type=str,
        help="the test case to execute",
    )
    parser.add_argument(
        "--use_tls",
        default=False,
        type=resources.parse_bool,
        help="require a secure connection",
    )
    parser.add_argument(
        "--use_test_ca",
        default=False,
        type=resources.parse_bool,
        help="replace platform root CAs with ca.pem",
    )
    parser.add_argument(
        "--server_host_override",
        type=str,
        help="the server host to which to claim to connect",
    )
    parser.add_argument(
        "--oauth_scope", type=str, help="scope for OAuth tokens"
    )
    parser.add_argument(
        "--default_service_account",
        type=str,
        help="email address of the default service account",
    )
    parser.add_argument(
        "--service_account_key_file",
        type=str,
        help=(
            "path to the JSON key of the service account; defaults to"
            " $GOOGLE_APPLICATION_CREDENTIALS"
        ),
    )
    return parser.parse_args(argv)


def _extra_params(args):
    return {
        "service_account": args.default_service_account,
        "oauth_scope": args.oauth_scope,
        "service_account_key_file": args.service_account_key_file,
    }


def test_interoperability(argv=None):
    args = parse_interop_client_args(argv)
    asyncio.run(
        orchestrator.run_test(
            catalog.default_catalog(),
            f"{args.server_host}:{args.server_port}",
            args.server_host_override,
            args.test_case,
            args.use_tls,
            args.use_test_ca,
            _extra_params(args),
        )
    )
    print(f"OK: {args.test_case}")


def main():
    logging.basicConfig(level=logging.INFO)
    test_interoperability()


if __name__ == "__main__":
    main()
