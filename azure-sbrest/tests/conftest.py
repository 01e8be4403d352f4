# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import json
import pytest
import requests
from requests.structures import CaseInsensitiveDict
from azure.sbrest.credential import ServiceBusCredential

FAKE_NAMESPACE = "fake-namespace"
FAKE_HOSTNAME = FAKE_NAMESPACE + ".servicebus.windows.net"
FAKE_ENDPOINT = "https://" + FAKE_HOSTNAME
FAKE_KEY_NAME = "RootManageSharedAccessKey"
FAKE_ACCESS_KEY = "Zm9vYmFyYmF6cXV4c2VjcmV0a2V5"
FAKE_CONNECTION_STRING = (
    "Endpoint=sb://{hostname}/;SharedAccessKeyName={key_name};SharedAccessKey={key}".format(
        hostname=FAKE_HOSTNAME, key_name=FAKE_KEY_NAME, key=FAKE_ACCESS_KEY
    )
)
FAKE_LOCATION = FAKE_ENDPOINT + "/fake-queue/messages/31907572-1647-43c3-8741-631acd554d6f/7da9cfd5-40d5-4bb1-8d64-ec5a52e1c547"

"""
NOTE: ALL tests that need some kind of non-specific, arbitrary exception should use
the following fixture. Raising Exception directly can hide other errors that are caught by
broad handling, which a class defined nowhere else cannot.
"""


@pytest.fixture
def arbitrary_exception():
    class ArbitraryException(Exception):
        pass

    return ArbitraryException("arbitrary")


@pytest.fixture
def connection_string():
    return FAKE_CONNECTION_STRING


@pytest.fixture
def credential():
    return ServiceBusCredential(
        endpoint=FAKE_ENDPOINT, key_name=FAKE_KEY_NAME, access_key=FAKE_ACCESS_KEY
    )


def make_response(status_code=200, body=b"", headers=None, reason=None):
    """Create a real requests.Response, as a stub broker would return it"""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason or "__fake_reason__"
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    return response


def make_message_response(broker_properties, body=b"", location=FAKE_LOCATION, extra_headers=None):
    headers = {
        "BrokerProperties": json.dumps(broker_properties),
        "Content-Type": "application/atom+xml;type=entry;charset=utf-8",
        "Server": "Microsoft-HTTPAPI/2.0",
        "Date": "Wed, 02 Mar 2016 22:16:04 GMT",
    }
    if location:
        headers["Location"] = location
    if extra_headers:
        headers.update(extra_headers)
    return make_response(status_code=201, body=body, headers=headers, reason="Created")


@pytest.fixture
def stub_response():
    return make_response


@pytest.fixture
def stub_message_response():
    return make_message_response


@pytest.fixture
def fake_location():
    return FAKE_LOCATION
