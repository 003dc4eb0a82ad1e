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
"""Implementations of interoperability test methods."""

import asyncio
import inspect
import json
import logging
from typing import Any, Mapping, Optional, Union

import grpc
from grpc.experimental import aio

from interop_client import completion
from interop_client import credentials
from interop_client import errors
from interop_client.schema import empty_pb2
from interop_client.schema import messages_pb2
from interop_client.schema import test_pb2_grpc

_LOGGER = logging.getLogger(__name__)

INITIAL_METADATA_KEY = "x-grpc-test-echo-initial"
TRAILING_METADATA_KEY = "x-grpc-test-echo-trailing-bin"

_INITIAL_METADATA_VALUE = "test_initial_metadata_value"
_TRAILING_METADATA_HEX = "ababab"

_LARGE_REQUEST_SIZE = 271828
_LARGE_RESPONSE_SIZE = 314159
_REQUEST_PAYLOAD_SIZES = (
    27182,
    8,
    1828,
    45904,
)
_RESPONSE_PAYLOAD_SIZES = (
    31415,
    9,
    2653,
    58979,
)

# Local deadline expiry races with the transport tearing down the stream, so
# either status is a correct outcome for a call that runs out of time.
_DEADLINE_STATUS_CODES = (
    grpc.StatusCode.DEADLINE_EXCEEDED,
    grpc.StatusCode.INTERNAL,
)
DEFAULT_SLEEPING_SERVER_TIMEOUT_S = 0.001

_STATUS_MESSAGE = "test status message"
_SPECIAL_STATUS_MESSAGE = (
    b"\t\ntest with whitespace\r\nand Unicode BMP \xe2\x98\xba and non-BMP"
    b" \xf0\x9f\x98\x88\t\n".decode("utf-8")
)
_ECHOED_STATUS_CODE = 2

_STATUS_CODES_BY_VALUE = {code.value[0]: code for code in grpc.StatusCode}


def status_code_from_value(value: int) -> grpc.StatusCode:
    try:
        return _STATUS_CODES_BY_VALUE[value]
    except KeyError:
        raise ValueError(f"unknown status code {value}") from None


def _zero_payload(size: int) -> messages_pb2.Payload:
    return messages_pb2.Payload(body=b"\x00" * size)


async def _expect_status_code(
    call: aio.Call, expected_code: grpc.StatusCode
) -> None:
    code = await call.code()
    if code != expected_code:
        raise ValueError("expected code %s, got %s" % (expected_code, code))


async def _expect_status_details(call: aio.Call, expected_details: str) -> None:
    details = await call.details()
    if details != expected_details:
        raise ValueError(
            "expected message %r, got %r" % (expected_details, details)
        )


async def _validate_status_code_and_details(
    call: aio.Call, expected_code: grpc.StatusCode, expected_details: str
) -> None:
    await _expect_status_code(call, expected_code)
    await _expect_status_details(call, expected_details)


def _validate_payload_type_and_length(
    response: Union[
        messages_pb2.SimpleResponse, messages_pb2.StreamingOutputCallResponse
    ],
    expected_type: Any,
    expected_length: int,
) -> None:
    if response.payload.type != expected_type:
        raise ValueError(
            "expected payload type %s, got %s"
            % (
                messages_pb2.PayloadType.Name(expected_type),
                response.payload.type,
            )
        )
    elif len(response.payload.body) != expected_length:
        raise ValueError(
            "expected payload body size %d, got %d"
            % (expected_length, len(response.payload.body))
        )


def _large_unary_request(
    fill_username: bool = False, fill_oauth_scope: bool = False
) -> messages_pb2.SimpleRequest:
    return messages_pb2.SimpleRequest(
        response_type=messages_pb2.COMPRESSABLE,
        response_size=_LARGE_RESPONSE_SIZE,
        payload=_zero_payload(_LARGE_REQUEST_SIZE),
        fill_username=fill_username,
        fill_oauth_scope=fill_oauth_scope,
    )


def _ping_pong_request(
    response_size: int, payload_size: int
) -> messages_pb2.StreamingOutputCallRequest:
    return messages_pb2.StreamingOutputCallRequest(
        response_type=messages_pb2.COMPRESSABLE,
        response_parameters=(
            messages_pb2.ResponseParameters(size=response_size),
        ),
        payload=_zero_payload(payload_size),
    )


async def _large_unary_common_behavior(
    stub: test_pb2_grpc.TestServiceStub,
    fill_username: bool,
    fill_oauth_scope: bool,
    call_credentials: Optional[grpc.CallCredentials],
) -> messages_pb2.SimpleResponse:
    request = _large_unary_request(fill_username, fill_oauth_scope)
    response = await stub.UnaryCall(request, credentials=call_credentials)
    _validate_payload_type_and_length(
        response, messages_pb2.COMPRESSABLE, _LARGE_RESPONSE_SIZE
    )
    return response


async def empty_unary(stub: test_pb2_grpc.TestServiceStub) -> None:
    response = await stub.EmptyCall(empty_pb2.Empty())
    if not isinstance(response, empty_pb2.Empty):
        raise TypeError(
            'response is of type "%s", not empty_pb2.Empty!' % type(response)
        )


async def large_unary(stub: test_pb2_grpc.TestServiceStub) -> None:
    await _large_unary_common_behavior(stub, False, False, None)


async def client_streaming(stub: test_pb2_grpc.TestServiceStub) -> None:
    call = stub.StreamingInputCall()
    for size in _REQUEST_PAYLOAD_SIZES:
        await call.write(
            messages_pb2.StreamingInputCallRequest(payload=_zero_payload(size))
        )
    await call.done_writing()
    response = await call
    if response.aggregated_payload_size != sum(_REQUEST_PAYLOAD_SIZES):
        raise ValueError(
            "expected aggregated size %d, got %d"
            % (sum(_REQUEST_PAYLOAD_SIZES), response.aggregated_payload_size)
        )


async def server_streaming(stub: test_pb2_grpc.TestServiceStub) -> None:
    request = messages_pb2.StreamingOutputCallRequest(
        response_type=messages_pb2.COMPRESSABLE,
        response_parameters=[
            messages_pb2.ResponseParameters(size=size)
            for size in _RESPONSE_PAYLOAD_SIZES
        ],
    )
    call = stub.StreamingOutputCall(request)
    response_count = 0
    async for response in call:
        if response_count >= len(_RESPONSE_PAYLOAD_SIZES):
            raise ValueError(
                "expected %d responses, got at least %d"
                % (len(_RESPONSE_PAYLOAD_SIZES), response_count + 1)
            )
        _validate_payload_type_and_length(
            response,
            messages_pb2.COMPRESSABLE,
            request.response_parameters[response_count].size,
        )
        response_count += 1
    if response_count != len(_RESPONSE_PAYLOAD_SIZES):
        raise ValueError(
            "expected %d responses, got %d"
            % (len(_RESPONSE_PAYLOAD_SIZES), response_count)
        )
    await _expect_status_code(call, grpc.StatusCode.OK)


async def ping_pong(stub: test_pb2_grpc.TestServiceStub) -> None:
    call = stub.FullDuplexCall()
    rounds = list(zip(_RESPONSE_PAYLOAD_SIZES, _REQUEST_PAYLOAD_SIZES))
    await call.write(_ping_pong_request(*rounds[0]))
    for index, (response_size, _) in enumerate(rounds):
        response = await call.read()
        if response == aio.EOF:
            raise ValueError(
                "expected %d responses, got %d" % (len(rounds), index)
            )
        _validate_payload_type_and_length(
            response, messages_pb2.COMPRESSABLE, response_size
        )
        if index + 1 == len(rounds):
            await call.done_writing()
        else:
            await call.write(_ping_pong_request(*rounds[index + 1]))
    if await call.read() != aio.EOF:
        raise ValueError("expected exactly %d responses" % len(rounds))
    await _validate_status_code_and_details(call, grpc.StatusCode.OK, "")


async def cancel_after_begin(stub: test_pb2_grpc.TestServiceStub) -> None:
    call = stub.StreamingInputCall()
    call.cancel()
    if not call.cancelled():
        raise ValueError("expected cancelled method to return True")
    await _expect_status_code(call, grpc.StatusCode.CANCELLED)


async def cancel_after_first_response(
    stub: test_pb2_grpc.TestServiceStub,
) -> None:
    call = stub.FullDuplexCall()
    await call.write(
        _ping_pong_request(_RESPONSE_PAYLOAD_SIZES[0], _REQUEST_PAYLOAD_SIZES[0])
    )
    # The contents of the response are covered by ping_pong.
    if await call.read() == aio.EOF:
        raise ValueError("expected a response before cancelling")

    call.cancel()

    try:
        response = await call.read()
    except asyncio.CancelledError:
        await _expect_status_code(call, grpc.StatusCode.CANCELLED)
    else:
        raise ValueError(
            "expected call to be cancelled, got response %s" % response
        )


async def timeout_on_sleeping_server(
    stub: test_pb2_grpc.TestServiceStub, args: Mapping[str, Any]
) -> None:
    timeout = args.get("timeout_s", DEFAULT_SLEEPING_SERVER_TIMEOUT_S)
    call = stub.FullDuplexCall(timeout=timeout)
    request = messages_pb2.StreamingOutputCallRequest(
        response_type=messages_pb2.COMPRESSABLE,
        payload=_zero_payload(_REQUEST_PAYLOAD_SIZES[0]),
    )
    try:
        # The send side stays open so the server keeps waiting for requests.
        await call.write(request)
        response = await call.read()
    except (aio.AioRpcError, asyncio.InvalidStateError) as error:
        _LOGGER.debug("Call ended while waiting on the server: %r", error)
    else:
        raise ValueError(
            "expected call to exceed deadline, got response %s" % response
        )
    code = await call.code()
    if code not in _DEADLINE_STATUS_CODES:
        raise ValueError(
            "expected code to be one of %s, got %s"
            % (_DEADLINE_STATUS_CODES, code)
        )


async def empty_stream(stub: test_pb2_grpc.TestServiceStub) -> None:
    call = stub.FullDuplexCall()
    await call.done_writing()
    response = await call.read()
    if response != aio.EOF:
        raise ValueError("expected exactly 0 responses, got %s" % response)
    await _expect_status_code(call, grpc.StatusCode.OK)


async def _drain(call: aio.StreamStreamCall) -> int:
    response_count = 0
    while await call.read() != aio.EOF:
        response_count += 1
    return response_count


async def _expect_echoed_status_on_unary_call(
    stub: test_pb2_grpc.TestServiceStub, details: str
) -> None:
    request = messages_pb2.SimpleRequest(
        response_type=messages_pb2.COMPRESSABLE,
        response_size=1,
        payload=_zero_payload(1),
        response_status=messages_pb2.EchoStatus(
            code=_ECHOED_STATUS_CODE, message=details
        ),
    )
    call = stub.UnaryCall(request)
    await _validate_status_code_and_details(
        call, status_code_from_value(_ECHOED_STATUS_CODE), details
    )


async def _expect_echoed_status_on_full_duplex_call(
    stub: test_pb2_grpc.TestServiceStub, details: str
) -> None:
    status = status_code_from_value(_ECHOED_STATUS_CODE)
    call = stub.FullDuplexCall()
    request = messages_pb2.StreamingOutputCallRequest(
        response_type=messages_pb2.COMPRESSABLE,
        response_parameters=(messages_pb2.ResponseParameters(size=1),),
        payload=_zero_payload(1),
        response_status=messages_pb2.EchoStatus(
            code=_ECHOED_STATUS_CODE, message=details
        ),
    )
    await call.write(request)
    await call.done_writing()
    try:
        await _drain(call)
    except aio.AioRpcError as rpc_error:
        if rpc_error.code() != status:
            raise
    await _validate_status_code_and_details(call, status, details)


async def status_code_and_message(stub: test_pb2_grpc.TestServiceStub) -> None:
    barrier = completion.CompletionBarrier(2)
    barrier.confirm(_expect_echoed_status_on_unary_call(stub, _STATUS_MESSAGE))
    barrier.confirm(
        _expect_echoed_status_on_full_duplex_call(stub, _STATUS_MESSAGE)
    )
    await barrier.wait()


async def special_status_message(stub: test_pb2_grpc.TestServiceStub) -> None:
    await _expect_echoed_status_on_unary_call(stub, _SPECIAL_STATUS_MESSAGE)


async def unimplemented_method(stub: test_pb2_grpc.TestServiceStub) -> None:
    call = stub.UnimplementedCall(empty_pb2.Empty())
    await _expect_status_code(call, grpc.StatusCode.UNIMPLEMENTED)


async def unimplemented_service(
    stub: test_pb2_grpc.UnimplementedServiceStub,
) -> None:
    call = stub.UnimplementedCall(empty_pb2.Empty())
    await _expect_status_code(call, grpc.StatusCode.UNIMPLEMENTED)


async def _expect_initial_metadata_echo(call: aio.Call) -> None:
    initial_metadata = await call.initial_metadata()
    echoed = initial_metadata.get_all(INITIAL_METADATA_KEY)
    if echoed != [_INITIAL_METADATA_VALUE]:
        raise ValueError(
            "expected initial metadata %s, got %s"
            % ([_INITIAL_METADATA_VALUE], echoed)
        )


async def _expect_trailing_metadata_echo(call: aio.Call) -> None:
    trailing_metadata = await call.trailing_metadata()
    echoed = trailing_metadata.get_all(TRAILING_METADATA_KEY)
    if not echoed:
        raise ValueError(
            "expected trailing metadata %s, got none" % TRAILING_METADATA_KEY
        )
    if echoed[0].hex() != _TRAILING_METADATA_HEX:
        raise ValueError(
            "expected trailing metadata %s, got %s"
            % (_TRAILING_METADATA_HEX, echoed[0].hex())
        )


async def _expect_unary_call_success(call: aio.UnaryUnaryCall) -> None:
    response = await call
    _validate_payload_type_and_length(
        response, messages_pb2.COMPRESSABLE, _LARGE_RESPONSE_SIZE
    )


async def _expect_full_duplex_trailing_metadata_echo(
    call: aio.StreamStreamCall,
) -> None:
    await call.write(
        messages_pb2.StreamingOutputCallRequest(
            response_parameters=(
                messages_pb2.ResponseParameters(size=_LARGE_RESPONSE_SIZE),
            ),
            payload=_zero_payload(_LARGE_REQUEST_SIZE),
        )
    )
    await call.done_writing()
    await _drain(call)
    await _expect_trailing_metadata_echo(call)


async def custom_metadata(stub: test_pb2_grpc.TestServiceStub) -> None:
    metadata = aio.Metadata(
        (INITIAL_METADATA_KEY, _INITIAL_METADATA_VALUE),
        (TRAILING_METADATA_KEY, bytes.fromhex(_TRAILING_METADATA_HEX)),
    )
    barrier = completion.CompletionBarrier(5)

    unary_call = stub.UnaryCall(_large_unary_request(), metadata=metadata)
    barrier.confirm(_expect_unary_call_success(unary_call))
    barrier.confirm(_expect_initial_metadata_echo(unary_call))
    barrier.confirm(_expect_trailing_metadata_echo(unary_call))

    full_duplex_call = stub.FullDuplexCall(metadata=metadata)
    barrier.confirm(_expect_initial_metadata_echo(full_duplex_call))
    barrier.confirm(_expect_full_duplex_trailing_metadata_echo(full_duplex_call))

    try:
        await barrier.wait()
    finally:
        unary_call.cancel()
        full_duplex_call.cancel()


def _service_account_email(args: Mapping[str, Any]) -> str:
    json_key_filename = credentials.service_account_key_file(args)
    with open(json_key_filename, "r") as json_key_file:
        return json.load(json_key_file)["client_email"]


def _expect_username(
    response: messages_pb2.SimpleResponse, wanted_username: str
) -> None:
    if wanted_username != response.username:
        raise ValueError(
            "expected username %s, got %s"
            % (wanted_username, response.username)
        )


def _expect_oauth_scope(
    response: messages_pb2.SimpleResponse, args: Mapping[str, Any]
) -> None:
    oauth_scope = args.get("oauth_scope")
    if not oauth_scope:
        raise errors.ConfigurationError("oauth_scope is required")
    if oauth_scope.find(response.oauth_scope) == -1:
        raise ValueError(
            'expected to find oauth scope "{}" in received "{}"'.format(
                response.oauth_scope, oauth_scope
            )
        )


async def compute_engine_creds(
    stub: test_pb2_grpc.TestServiceStub, args: Mapping[str, Any]
) -> None:
    response = await _large_unary_common_behavior(stub, True, True, None)
    _expect_username(response, args.get("service_account"))


async def service_account_creds(
    stub: test_pb2_grpc.TestServiceStub, args: Mapping[str, Any]
) -> None:
    wanted_email = _service_account_email(args)
    response = await _large_unary_common_behavior(stub, True, True, None)
    _expect_username(response, wanted_email)
    _expect_oauth_scope(response, args)


async def oauth2_auth_token(
    stub: test_pb2_grpc.TestServiceStub, args: Mapping[str, Any]
) -> None:
    wanted_email = _service_account_email(args)
    response = await _large_unary_common_behavior(stub, True, True, None)
    _expect_username(response, wanted_email)
    _expect_oauth_scope(response, args)


async def jwt_token_creds(
    stub: test_pb2_grpc.TestServiceStub, args: Mapping[str, Any]
) -> None:
    wanted_email = _service_account_email(args)
    response = await _large_unary_common_behavior(stub, True, False, None)
    _expect_username(response, wanted_email)


async def per_rpc_creds(
    stub: test_pb2_grpc.TestServiceStub, args: Mapping[str, Any]
) -> None:
    wanted_email = _service_account_email(args)
    call_credentials = await credentials.application_default_credentials(args)
    response = await _large_unary_common_behavior(
        stub, True, True, call_credentials
    )
    _expect_username(response, wanted_email)
    _expect_oauth_scope(response, args)


async def test_interoperability(
    method,
    stub: Union[
        test_pb2_grpc.TestServiceStub, test_pb2_grpc.UnimplementedServiceStub
    ],
    args: Optional[Mapping[str, Any]] = None,
) -> None:
    """Runs one test method against a stub.

    Methods taking a second parameter receive the test case's extra
    parameters; the others only receive the stub.
    """
    num_params = len(inspect.signature(method).parameters)
    if num_params == 1:
        await method(stub)
    elif num_params == 2:
        if args is None:
            raise ValueError(
                f"Failed to run method [{method.__name__}]: args is None"
            )
        await method(stub, args)
    else:
        raise ValueError(f"Invalid number of parameters [{num_params}]")
