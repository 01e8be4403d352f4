# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains tools for working with Service Bus Connection Strings"""

import urllib.parse
from typing import Dict, Optional
from .exceptions import ConfigError

__all__ = ["ConnectionString"]

CS_DELIMITER = ";"
CS_VAL_SEPARATOR = "="

ENDPOINT = "Endpoint"
SHARED_ACCESS_KEY_NAME = "SharedAccessKeyName"
SHARED_ACCESS_KEY = "SharedAccessKey"
ENTITY_PATH = "EntityPath"

_valid_keys = [ENDPOINT, SHARED_ACCESS_KEY_NAME, SHARED_ACCESS_KEY, ENTITY_PATH]
_required_keys = [ENDPOINT, SHARED_ACCESS_KEY_NAME, SHARED_ACCESS_KEY]

# The Service Bus portal hands out "sb://" endpoints, but the REST surface lives at "https://"
_valid_endpoint_schemes = ["sb", "https"]


class ConnectionString:
    """Key/value mappings for connection details.
    Uses the same syntax as dictionary
    """

    def __init__(self, connection_string: str) -> None:
        """Initializer for ConnectionString

        :param str connection_string: String with connection details provided by Azure
        :raises: TypeError if provided connection_string is not a string
        :raises: :class:`ConfigError` if provided connection_string is invalid
        """
        self._dict = _parse_connection_string(connection_string)
        self._hostname = _parse_endpoint_hostname(self._dict[ENDPOINT])

    def __contains__(self, item: str) -> bool:
        return item in self._dict

    def __getitem__(self, key: str) -> str:
        return self._dict[key]

    def __repr__(self) -> str:
        # The shared access key must never end up in logs
        return CS_DELIMITER.join(
            "{}={}".format(k, "****" if k == SHARED_ACCESS_KEY else v) for k, v in self._dict.items()
        )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value for key if key is in the dictionary, else default

        :param str key: The key to retrieve a value for
        :param str default: The default value returned if a key is not found
        :returns: The value for the given key
        """
        return self._dict.get(key, default)

    @property
    def hostname(self) -> str:
        """The fully qualified hostname of the Service Bus namespace"""
        return self._hostname

    @property
    def namespace(self) -> str:
        """The Service Bus namespace (the first label of the endpoint hostname)"""
        return self._hostname.split(".")[0]

    @property
    def https_endpoint(self) -> str:
        """The HTTPS endpoint of the namespace's REST surface"""
        return "https://{}".format(self._hostname)


def _parse_connection_string(connection_string: str) -> Dict[str, str]:
    """Return a dictionary of values contained in a given connection string"""
    if not isinstance(connection_string, str):
        raise TypeError("Connection String must be of type str")
    # Strings copied from the portal sometimes carry a trailing delimiter
    cs_args = [arg.strip() for arg in connection_string.strip().rstrip(CS_DELIMITER).split(CS_DELIMITER)]
    try:
        d = dict(arg.split(CS_VAL_SEPARATOR, 1) for arg in cs_args)
    except ValueError:
        # An argument without a separator cannot form a key/value pair
        raise ConfigError("Invalid Connection String - Unable to parse")
    if len(cs_args) != len(d):
        # various errors related to incorrect parsing - duplicate args, bad syntax, etc.
        raise ConfigError("Invalid Connection String - Unable to parse")
    if not all(key in _valid_keys for key in d.keys()):
        raise ConfigError("Invalid Connection String - Invalid Key")
    _validate_keys(d)
    return d


def _validate_keys(d: Dict[str, str]) -> None:
    """Raise ConfigError if a required key is missing or empty in dict d"""
    for key in _required_keys:
        if not d.get(key):
            raise ConfigError("Invalid Connection String - Missing {}".format(key))


def _parse_endpoint_hostname(endpoint: str) -> str:
    """Return the hostname of a Service Bus endpoint URL"""
    try:
        url = urllib.parse.urlsplit(endpoint)
        hostname = url.hostname
    except ValueError as e:
        raise ConfigError("Invalid Connection String - Unable to parse Endpoint") from e
    if url.scheme not in _valid_endpoint_schemes or not hostname:
        raise ConfigError("Invalid Connection String - Endpoint is not an absolute URL")
    return hostname
