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
"""Channel and call credentials used by the interoperability test cases."""

import asyncio
import functools
import logging
import os
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Tuple

from google import auth as google_auth
from google.auth import environment_vars as google_auth_environment_vars
from google.auth import jwt as google_auth_jwt
from google.auth.transport import grpc as google_auth_transport_grpc
from google.auth.transport import requests as google_auth_transport_requests
import grpc

from interop_client import errors
from interop_client import resources

_LOGGER = logging.getLogger(__name__)

ChannelOptions = Sequence[Tuple[str, Any]]

# Resolves the call credentials a test case needs from its extra parameters.
CredentialResolver = Callable[[Mapping[str, Any]], Awaitable[grpc.CallCredentials]]


def _scopes(args: Mapping[str, Any]) -> Optional[Sequence[str]]:
    oauth_scope = args.get("oauth_scope")
    return [oauth_scope] if oauth_scope else None


def service_account_key_file(args: Mapping[str, Any]) -> str:
    key_file = args.get("service_account_key_file")
    if key_file:
        return key_file
    try:
        return os.environ[google_auth_environment_vars.CREDENTIALS]
    except KeyError:
        raise errors.ConfigurationError(
            "a service account key file is required, either through "
            "service_account_key_file or $%s"
            % google_auth_environment_vars.CREDENTIALS
        ) from None


async def _run_blocking(function, *args):
    # google-auth performs its token exchanges synchronously.
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(function, *args))


def _google_default_credentials(scopes):
    google_credentials, unused_project_id = google_auth.default(scopes=scopes)
    return google_credentials


def _metadata_call_credentials(google_credentials, request):
    return grpc.metadata_call_credentials(
        google_auth_transport_grpc.AuthMetadataPlugin(
            credentials=google_credentials,
            request=request,
        )
    )


async def application_default_credentials(
    args: Mapping[str, Any],
) -> grpc.CallCredentials:
    """Call credentials backed by the application default identity."""
    google_credentials = await _run_blocking(
        _google_default_credentials, _scopes(args)
    )
    _LOGGER.debug("Resolved application default credentials.")
    return _metadata_call_credentials(
        google_credentials, google_auth_transport_requests.Request()
    )


def _fetch_access_token(scopes):
    google_credentials = _google_default_credentials(scopes)
    google_credentials.refresh(google_auth_transport_requests.Request())
    return google_credentials.token


async def oauth2_access_token_credentials(
    args: Mapping[str, Any],
) -> grpc.CallCredentials:
    """Call credentials carrying an access token fetched up front."""
    token = await _run_blocking(_fetch_access_token, _scopes(args))
    _LOGGER.debug("Fetched an OAuth2 access token.")
    return grpc.access_token_call_credentials(token)


async def jwt_token_credentials(
    args: Mapping[str, Any],
) -> grpc.CallCredentials:
    """Call credentials signing JWTs with a service account key."""
    key_file = service_account_key_file(args)
    google_credentials = await _run_blocking(
        google_auth_jwt.OnDemandCredentials.from_service_account_file,
        key_file,
    )
    _LOGGER.debug("Loaded JWT credentials from %s.", key_file)
    return _metadata_call_credentials(google_credentials, None)


def get_channel_parameters(
    use_tls: bool, use_test_ca: bool, server_host_override: Optional[str]
) -> Tuple[Optional[grpc.ChannelCredentials], ChannelOptions]:
    """Builds the base channel credentials and options for a test channel.

    Returns:
      A (channel_credentials, options) pair. The credentials are None for an
      insecure channel.
    """
    if not use_tls:
        return None, ()

    if use_test_ca:
        try:
            root_certificates = resources.test_root_certificates()
        except OSError as error:
            raise errors.ConfigurationError(
                "use_test_ca requires the test CA bundle"
            ) from error
    else:
        root_certificates = None  # will load default roots.
    channel_credentials = grpc.ssl_channel_credentials(root_certificates)

    channel_opts = ()
    if server_host_override:
        channel_opts += (
            ("grpc.ssl_target_name_override", server_host_override),
            ("grpc.default_authority", server_host_override),
        )
    return channel_credentials, channel_opts


def combine(
    channel_credentials: Optional[grpc.ChannelCredentials],
    call_credentials: grpc.CallCredentials,
) -> grpc.ChannelCredentials:
    if channel_credentials is None:
        raise errors.ConfigurationError(
            "call credentials can only be attached to a TLS channel"
        )
    return grpc.composite_channel_credentials(
        channel_credentials, call_credentials
    )
