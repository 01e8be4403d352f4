# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the credential used to authenticate with a Service Bus namespace"""

import urllib.parse
from typing import Any
from .connection_string import (
    ConnectionString,
    SHARED_ACCESS_KEY_NAME,
    SHARED_ACCESS_KEY,
)
from .exceptions import ConfigError


class ServiceBusCredential:
    """Immutable Shared Access Key credential for a Service Bus namespace

    :ivar str endpoint: The absolute HTTPS URL of the namespace
    :ivar str key_name: The name of the Shared Access Policy
    :ivar str access_key: The Shared Access Key of the policy
    """

    __slots__ = ("_endpoint", "_key_name", "_access_key")

    def __init__(self, endpoint: str, key_name: str, access_key: str) -> None:
        """Initializer for ServiceBusCredential

        :param str endpoint: The absolute HTTPS URL of the namespace
        :param str key_name: The name of the Shared Access Policy
        :param str access_key: The Shared Access Key of the policy

        :raises: :class:`ConfigError` if any value is missing, or the endpoint is not an
            absolute HTTPS URL
        """
        endpoint = _sanitize_endpoint(endpoint)
        if not key_name:
            raise ConfigError("Shared Access Key Name is required")
        if not access_key:
            raise ConfigError("Shared Access Key is required")
        object.__setattr__(self, "_endpoint", endpoint)
        object.__setattr__(self, "_key_name", key_name)
        object.__setattr__(self, "_access_key", access_key)

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "ServiceBusCredential":
        """Create a credential from a Service Bus connection string

        :param str connection_string: The connection string for the namespace

        :raises: :class:`ConfigError` if the connection string is invalid
        :raises: TypeError if the connection string is not a string
        """
        cs = ConnectionString(connection_string)
        return cls(
            endpoint=cs.https_endpoint,
            key_name=cs[SHARED_ACCESS_KEY_NAME],
            access_key=cs[SHARED_ACCESS_KEY],
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ServiceBusCredential is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("ServiceBusCredential is immutable")

    def __repr__(self) -> str:
        return "ServiceBusCredential(endpoint={!r}, key_name={!r}, access_key='****')".format(
            self._endpoint, self._key_name
        )

    def __reduce__(self):
        raise TypeError("ServiceBusCredential cannot be serialized")

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def key_name(self) -> str:
        return self._key_name

    @property
    def access_key(self) -> str:
        return self._access_key

    @property
    def hostname(self) -> str:
        return urllib.parse.urlsplit(self._endpoint).hostname

    @property
    def namespace(self) -> str:
        return self.hostname.split(".")[0]


def _sanitize_endpoint(endpoint: str) -> str:
    if not isinstance(endpoint, str):
        raise ConfigError("Endpoint must be a string")
    try:
        url = urllib.parse.urlsplit(endpoint)
        hostname = url.hostname
    except ValueError as e:
        raise ConfigError("Endpoint is not a valid URL") from e
    if url.scheme != "https" or not hostname:
        raise ConfigError("Endpoint must be an absolute HTTPS URL")
    return endpoint.rstrip("/")
