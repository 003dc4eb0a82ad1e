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
"""Setup module for the gRPC Python interoperability test client."""

import os

import setuptools

_PACKAGE_PATH = os.path.realpath(os.path.dirname(__file__))
_README_PATH = os.path.join(_PACKAGE_PATH, "README.rst")

# Ensure we're in the proper directory whether or not we're being used by pip.
os.chdir(os.path.dirname(os.path.abspath(__file__)))

VERSION = "1.76.0"

CLASSIFIERS = [
    "Development Status :: 5 - Production/Stable",
    "Programming Language :: Python",
    "Programming Language :: Python :: 3",
    "License :: OSI Approved :: Apache Software License",
]

INSTALL_REQUIRES = (
    "grpcio>={version}".format(version=VERSION),
    "grpcio-tools>={version}".format(version=VERSION),
    "protobuf>=6.31.1,<7.0.0",
    "google-auth>=1.17.2",
    "requests>=2.14.2",
)

EXTRAS_REQUIRE = {
    "test": INSTALL_REQUIRES,
}

PACKAGE_DATA = {
    "interop_client": [
        "protos/*.proto",
        "certs/*.pem",
    ],
}

setuptools.setup(
    name="grpcio-interop-client",
    version=VERSION,
    description="gRPC Python interoperability test client",
    long_description=open(_README_PATH, "r").read(),
    author="The gRPC Authors",
    author_email="grpc-io@googlegroups.com",
    url="https://grpc.io",
    license="Apache License 2.0",
    classifiers=CLASSIFIERS,
    packages=setuptools.find_packages(".", include=("interop_client",)),
    package_data=PACKAGE_DATA,
    python_requires=">=3.9",
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    entry_points={
        "console_scripts": [
            "grpc-interop-client=interop_client.client:main",
        ],
    },
)
