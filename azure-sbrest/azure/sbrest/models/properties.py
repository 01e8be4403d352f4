# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the policies that recover custom message properties from the headers
of a received message.

Service Bus returns each custom property of a message as a response header. Header names are
mangled by the broker (lower-cased, with non-alphanumeric characters removed) and string values
are returned wrapped in quotes.
"""
import abc
import re
from typing import Iterable, List, Mapping, Optional
from ..custom_typing import CustomProperties

# Characters trimmed from both ends of a property value
VALUE_TRIM_CHARS = ' \t\r\n"'

# Headers that are part of the protocol, not custom properties. Lower-case.
RESERVED_HEADERS = frozenset(
    [
        "brokerproperties",
        "content-type",
        "content-length",
        "transfer-encoding",
        "connection",
        "keep-alive",
        "strict-transport-security",
        "location",
        "server",
        "date",
    ]
)

_non_alphanumeric = re.compile("[^a-z0-9]")


def normalize_property_name(name: str) -> str:
    """Return the header name the broker uses for a custom property name"""
    return _non_alphanumeric.sub("", name.lower())


def trim_property_value(value: str) -> str:
    return value.strip(VALUE_TRIM_CHARS)


class PropertyPolicy(abc.ABC):
    """Strategy for mapping response headers to custom properties"""

    @abc.abstractmethod
    def extract(self, headers: Mapping[str, str]) -> CustomProperties:
        """Return the custom properties contained in response headers

        :param headers: The response headers. Lookups must be case-insensitive.
        """
        pass


class AllowListPropertyPolicy(PropertyPolicy):
    def __init__(self, property_names: Iterable[str]) -> None:
        """Recover only the named custom properties, keyed by the names as given

        :param property_names: The names of the custom properties to recover
        """
        self.property_names: List[str] = list(property_names)

    def __repr__(self) -> str:
        return "AllowListPropertyPolicy({!r})".format(self.property_names)

    def extract(self, headers: Mapping[str, str]) -> CustomProperties:
        properties = {}
        for name in self.property_names:
            value = trim_property_value(headers.get(normalize_property_name(name), ""))
            if value:
                properties[name] = value
        return properties


class CaptureAllPropertyPolicy(PropertyPolicy):
    """Recover every non-reserved header as a custom property, keyed by the lower-cased
    header name
    """

    def __repr__(self) -> str:
        return "CaptureAllPropertyPolicy()"

    def extract(self, headers: Mapping[str, str]) -> CustomProperties:
        properties = {}
        for name, value in headers.items():
            key = name.lower()
            if key in RESERVED_HEADERS:
                continue
            value = trim_property_value(value)
            if value:
                properties[key] = value
        return properties


def create_property_policy(property_names: Optional[Iterable[str]] = None) -> PropertyPolicy:
    """Return an allow-list policy if property names are provided, otherwise a capture-all policy"""
    if property_names is None:
        return CaptureAllPropertyPolicy()
    return AllowListPropertyPolicy(property_names)
