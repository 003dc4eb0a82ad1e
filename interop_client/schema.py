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
"""Message and service modules generated from the interop test protos.

The protos are compiled at import time by grpc_tools through grpc.protos and
grpc.protos_and_services. Proto imports and the generated module names are
both resolved against sys.path, so the directory holding this package is
registered as an include root before anything is loaded.
"""

import os
import sys

import grpc

_INCLUDE_ROOT = os.path.dirname(
    os.path.dirname(os.path.realpath(os.path.abspath(__file__)))
)
_PROTO_DIR = os.path.join("interop_client", "protos")


def add_include_directories(include_directories):
    for directory in include_directories:
        if directory not in sys.path:
            sys.path.append(directory)


def proto_path(proto_name):
    return os.path.join(_PROTO_DIR, proto_name)


add_include_directories((_INCLUDE_ROOT,))

empty_pb2 = grpc.protos(proto_path("empty.proto"))
messages_pb2 = grpc.protos(proto_path("messages.proto"))
test_pb2, test_pb2_grpc = grpc.protos_and_services(proto_path("test.proto"))
