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
"""An in-process interop server behaving as the reference server does."""

import asyncio
import datetime
import os

import grpc
from grpc.experimental import aio

from interop_client import methods
from interop_client.schema import empty_pb2
from interop_client.schema import messages_pb2
from interop_client.schema import test_pb2_grpc

TEST_USERNAME = "interop-test@example.com"
TEST_OAUTH_SCOPE = "https://www.googleapis.com/auth/xapi.zoo"

_CREDENTIALS_DIR = os.path.join(os.path.dirname(__file__), "credentials")
_PRIVATE_KEY_PATH = os.path.join(_CREDENTIALS_DIR, "server1.key")
_CERTIFICATE_CHAIN_PATH = os.path.join(_CREDENTIALS_DIR, "server1.pem")


def has_server_credentials():
    return os.path.exists(_PRIVATE_KEY_PATH) and os.path.exists(
        _CERTIFICATE_CHAIN_PATH
    )


def server_credentials():
    with open(_PRIVATE_KEY_PATH, "rb") as private_key_file:
        private_key = private_key_file.read()
    with open(_CERTIFICATE_CHAIN_PATH, "rb") as certificate_chain_file:
        certificate_chain = certificate_chain_file.read()
    return grpc.ssl_server_credentials(((private_key, certificate_chain),))


async def _maybe_echo_metadata(servicer_context):
    """Copies metadata from request to response if it is present."""
    invocation_metadata = dict(servicer_context.invocation_metadata())
    if methods.INITIAL_METADATA_KEY in invocation_metadata:
        initial_metadatum = (
            methods.INITIAL_METADATA_KEY,
            invocation_metadata[methods.INITIAL_METADATA_KEY],
        )
        await servicer_context.send_initial_metadata((initial_metadatum,))
    if methods.TRAILING_METADATA_KEY in invocation_metadata:
        trailing_metadatum = (
            methods.TRAILING_METADATA_KEY,
            invocation_metadata[methods.TRAILING_METADATA_KEY],
        )
        servicer_context.set_trailing_metadata((trailing_metadatum,))


async def _maybe_echo_status(request, servicer_context):
    """Echos the RPC status if demanded by the request."""
    if request.HasField("response_status"):
        await servicer_context.abort(
            methods.status_code_from_value(request.response_status.code),
            request.response_status.message,
        )


async def _sleep_interval(response_parameters):
    if response_parameters.interval_us != 0:
        await asyncio.sleep(
            datetime.timedelta(
                microseconds=response_parameters.interval_us
            ).total_seconds()
        )


class TestServiceServicer(test_pb2_grpc.TestServiceServicer):
    async def EmptyCall(self, request, context):
        await _maybe_echo_metadata(context)
        return empty_pb2.Empty()

    async def UnaryCall(self, request, context):
        await _maybe_echo_metadata(context)
        await _maybe_echo_status(request, context)
        response = messages_pb2.SimpleResponse(
            payload=messages_pb2.Payload(
                type=messages_pb2.COMPRESSABLE,
                body=b"\x00" * request.response_size,
            )
        )
        if request.fill_username:
            response.username = TEST_USERNAME
        if request.fill_oauth_scope:
            response.oauth_scope = TEST_OAUTH_SCOPE
        return response

    async def StreamingOutputCall(self, request, context):
        await _maybe_echo_status(request, context)
        for response_parameters in request.response_parameters:
            await _sleep_interval(response_parameters)
            yield messages_pb2.StreamingOutputCallResponse(
                payload=messages_pb2.Payload(
                    type=request.response_type,
                    body=b"\x00" * response_parameters.size,
                )
            )

    async def StreamingInputCall(self, request_async_iterator, unused_context):
        aggregate_size = 0
        async for request in request_async_iterator:
            if request.payload is not None and request.payload.body:
                aggregate_size += len(request.payload.body)
        return messages_pb2.StreamingInputCallResponse(
            aggregated_payload_size=aggregate_size
        )

    async def FullDuplexCall(self, request_async_iterator, context):
        await _maybe_echo_metadata(context)
        async for request in request_async_iterator:
            await _maybe_echo_status(request, context)
            for response_parameters in request.response_parameters:
                await _sleep_interval(response_parameters)
                yield messages_pb2.StreamingOutputCallResponse(
                    payload=messages_pb2.Payload(
                        type=request.payload.type,
                        body=b"\x00" * response_parameters.size,
                    )
                )

    async def UnimplementedCall(self, request, context):
        await context.abort(
            grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!"
        )


async def start_test_server(
    port=0,
    secure=False,
    server_credentials=None,
    servicer=None,
    unimplemented_servicer=None,
):
    server = aio.server(options=(("grpc.so_reuseport", 0),))
    test_pb2_grpc.add_TestServiceServicer_to_server(
        servicer or TestServiceServicer(), server
    )
    if unimplemented_servicer is not None:
        test_pb2_grpc.add_UnimplementedServiceServicer_to_server(
            unimplemented_servicer, server
        )

    if secure:
        port = server.add_secure_port("[::]:%d" % port, server_credentials)
    else:
        port = server.add_insecure_port("[::]:%d" % port)

    await server.start()

    # Returning the server keeps it from being garbage collected.
    return "localhost:%d" % port, server
