# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""Define Service Bus client exceptions to be shared across package"""
from typing import Optional


class ServiceBusClientError(Exception):
    """Represents a failure from the Service Bus client"""

    pass


class ConfigError(ServiceBusClientError, ValueError):
    """Represents an invalid connection string or client configuration"""

    pass


class InvalidURL(ServiceBusClientError, ValueError):
    """Represents a failure to compose a valid absolute request URL"""

    pass


class TransportError(ServiceBusClientError):
    """Represents a network failure that persisted through all retry attempts"""

    pass


class DecodeError(ServiceBusClientError):
    """Represents a response that could not be decoded into a Message"""

    pass


class ProtocolError(ServiceBusClientError):
    """Represents an unexpected HTTP status returned by Service Bus for an operation"""

    def __init__(self, operation: str, status_code: int, reason: Optional[str] = None) -> None:
        """
        :param str operation: The name of the operation that failed (e.g. "send")
        :param int status_code: The HTTP status code returned by Service Bus
        :param str reason: The HTTP reason phrase, if any
        """
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        message = "Service Bus responded to {operation} with a failed status ({status})".format(
            operation=operation, status=status_code
        )
        if reason:
            message += " - {}".format(reason)
        super().__init__(message)
