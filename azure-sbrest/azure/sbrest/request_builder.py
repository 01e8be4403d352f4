# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module builds the URLs and signed requests sent to Service Bus.
Nothing here performs network I/O.
"""

import logging
import urllib.parse
from typing import Dict, Mapping, Optional, Union
from .credential import ServiceBusCredential
from .exceptions import InvalidURL
from . import constant
from . import sastoken as st

logger = logging.getLogger(__name__)

VALID_METHODS = ["GET", "POST", "PUT", "DELETE"]

_reserved_headers = [constant.HEADER_ACCEPT.lower(), constant.HEADER_AUTHORIZATION.lower()]


class ServiceBusRequest:
    """An outbound HTTP request to Service Bus

    :ivar str method: The HTTP method
    :ivar str url: The absolute URL of the request
    :ivar dict headers: The HTTP headers of the request
    :ivar bytes body: The body of the request
    """

    def __init__(self, method: str, url: str, headers: Dict[str, str], body: bytes) -> None:
        self.method = method
        self.url = url
        self.headers = headers
        self.body = body

    def __repr__(self) -> str:
        # Headers are left out, as they contain the SAS Token
        return "ServiceBusRequest({} {})".format(self.method, self.url)


def build_url(endpoint: str, path: str) -> str:
    """Create a versioned Service Bus URL from a namespace endpoint and an operation path

    :param str endpoint: The absolute HTTPS URL of the namespace
    :param str path: The path of the operation, optionally carrying its own query
        parameters (e.g. "/myqueue/messages/head?timeout=30")

    :returns: The absolute URL, with the API version query parameter set
    :raises: :class:`InvalidURL` if the result is not a valid absolute HTTPS URL
    """
    if not isinstance(endpoint, str) or not isinstance(path, str):
        raise InvalidURL("Endpoint and path must be strings")
    if path and not path.startswith("/"):
        path = "/" + path
    target = endpoint.rstrip("/") + path
    try:
        url = urllib.parse.urlsplit(target)
        hostname = url.hostname
    except ValueError as e:
        raise InvalidURL("Unable to parse URL: {}".format(target)) from e
    if url.scheme != "https" or not hostname:
        raise InvalidURL("Not an absolute HTTPS URL: {}".format(target))

    query = urllib.parse.parse_qsl(url.query, keep_blank_values=True)
    query = [(k, v) for (k, v) in query if k != constant.PARAM_API_VERSION]
    query.append((constant.PARAM_API_VERSION, constant.SERVICEBUS_API_VERSION))
    return urllib.parse.urlunsplit(
        (url.scheme, url.netloc, url.path, urllib.parse.urlencode(query), "")
    )


def validate_url(url: str) -> str:
    """Validate that a URL received from Service Bus (e.g. a lock Location) can be requested

    :raises: :class:`InvalidURL` if the URL is not a valid absolute HTTPS URL
    """
    if not url or not isinstance(url, str):
        raise InvalidURL("No URL provided")
    try:
        parsed = urllib.parse.urlsplit(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidURL("Unable to parse URL: {}".format(url)) from e
    if parsed.scheme != "https" or not hostname:
        raise InvalidURL("Not an absolute HTTPS URL: {}".format(url))
    return url


def build_request(
    credential: ServiceBusCredential,
    url: str,
    method: str,
    body: Optional[Union[bytes, str]] = None,
    properties: Optional[Mapping[str, str]] = None,
    user_agent: Optional[str] = None,
) -> ServiceBusRequest:
    """Create a signed request for Service Bus

    :param credential: The credential used to sign the request
    :type credential: :class:`ServiceBusCredential`
    :param str url: The absolute URL of the request
    :param str method: The HTTP method (e.g. "POST")
    :param body: The body of the request
    :type body: bytes or str
    :param dict properties: Custom message properties. Each one is sent as a header, with the
        key used verbatim as the header name.
    :param str user_agent: The User-Agent string to identify the client with

    :returns: The request
    :rtype: :class:`ServiceBusRequest`
    """
    method = method.upper()
    if method not in VALID_METHODS:
        raise ValueError("Invalid method type: {}".format(method))
    if body is None:
        body = b""
    elif isinstance(body, str):
        body = body.encode("utf-8")

    headers = {}
    if user_agent:
        headers[constant.HEADER_USER_AGENT] = user_agent
    if properties:
        for key, value in properties.items():
            if key.lower() in _reserved_headers:
                logger.warning("Ignoring custom property '{}' - reserved header".format(key))
                continue
            headers[key] = str(value)
    headers[constant.HEADER_ACCEPT] = "application/json"
    headers[constant.HEADER_AUTHORIZATION] = str(st.generate_sastoken(credential, credential.endpoint))

    logger.debug("Built {} request for {}".format(method, url))
    return ServiceBusRequest(method=method, url=url, headers=headers, body=body)
