# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import socks
from typing import List, Optional
from .credential import ServiceBusCredential
from . import constant

logger = logging.getLogger(__name__)


string_to_socks_constant_map = {"HTTP": socks.HTTP, "SOCKS4": socks.SOCKS4, "SOCKS5": socks.SOCKS5}
socks_constant_to_string_map = {socks.HTTP: "HTTP", socks.SOCKS4: "SOCKS4", socks.SOCKS5: "SOCKS5"}


class ProxyOptions:
    """
    A class containing various options to send traffic through proxy servers.
    """

    def __init__(
        self,
        proxy_type: str,
        proxy_address: str,
        proxy_port: Optional[int] = None,
        proxy_username: Optional[str] = None,
        proxy_password: Optional[str] = None,
    ):
        """
        Initializer for proxy options.
        :param str proxy_type: The type of the proxy server. This can be one of three possible choices: "HTTP", "SOCKS4", or "SOCKS5"
        :param str proxy_address: IP address or DNS name of proxy server
        :param int proxy_port: The port of the proxy server. Defaults to 1080 for socks and 8080 for http.
        :param str proxy_username: (optional) username for the proxy server.
        :param str proxy_password: (optional) password for the proxy server.
        """
        (self.proxy_type, self.proxy_type_socks) = _format_proxy_type(proxy_type)
        self.proxy_address = proxy_address
        if proxy_port is None:
            self.proxy_port = _derive_default_proxy_port(self.proxy_type)
        else:
            self.proxy_port = int(proxy_port)
        self.proxy_username = proxy_username
        self.proxy_password = proxy_password


class RetryPolicy:
    """
    Exponential backoff with jitter, applied to transient network failures.

    The delay before retry n (starting at 1) is initial_delay * 2^(n-1), capped at max_delay,
    and then randomly spread between -jitter_down and +jitter_up of its value.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 4,
        initial_delay: float = 0.5,
        max_delay: float = 8.0,
        jitter_up: float = 0.25,
        jitter_down: float = 0.5,
    ) -> None:
        """Initializer for RetryPolicy

        :param int max_attempts: Total number of attempts, including the first one
        :param float initial_delay: Delay before the first retry, in seconds
        :param float max_delay: Upper bound for any delay before jitter, in seconds
        :param float jitter_up: Maximum fraction a delay can be increased by
        :param float jitter_down: Maximum fraction a delay can be decreased by
        """
        self.max_attempts = _sanitize_max_attempts(max_attempts)
        self.initial_delay = _sanitize_non_negative("initial_delay", initial_delay)
        self.max_delay = _sanitize_non_negative("max_delay", max_delay)
        self.jitter_up = _sanitize_non_negative("jitter_up", jitter_up)
        self.jitter_down = _sanitize_non_negative("jitter_down", jitter_down)
        if self.jitter_down > 1:
            raise ValueError("'jitter_down' cannot exceed 1")

    def get_delay(self, retry_number: int) -> float:
        """Return the un-jittered delay before a given retry (starting at 1)"""
        return min(self.initial_delay * pow(2, retry_number - 1), self.max_delay)


class ClientConfig:
    """
    Class for storing all configurations/options for a Service Bus client.
    """

    def __init__(
        self,
        *,
        credential: ServiceBusCredential,
        timeout: float = constant.DEFAULT_HTTP_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        proxy_options: Optional[ProxyOptions] = None,
        server_verification_cert: Optional[str] = None,
        product_info: str = "",
        property_names: Optional[List[str]] = None,
    ) -> None:
        """Initializer for ClientConfig

        :param credential: The credential of the Service Bus namespace
        :type credential: :class:`ServiceBusCredential`
        :param float timeout: Time allowed for a single HTTP attempt, in seconds
        :param retry_policy: Retry behavior for transient network failures
        :type retry_policy: :class:`RetryPolicy`
        :param proxy_options: Details of proxy configuration
        :type proxy_options: :class:`ProxyOptions`
        :param str server_verification_cert: Certificate which can be used to validate a
            server-side TLS connection
        :param str product_info: A custom identification string appended to the User-Agent
        :param list property_names: Names of the custom properties to recover from received
            messages. If not provided, all non-reserved headers are recovered.
        """
        # Auth
        self.credential = credential

        # Network
        self.timeout = _sanitize_timeout(timeout)
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy()
        self.proxy_options = proxy_options
        self.server_verification_cert = server_verification_cert
        self.product_info = product_info

        # Messages
        self.property_names = _sanitize_property_names(property_names)


# Sanitization #


def _format_proxy_type(proxy_type):
    """Returns a tuple of formats for proxy type (string, socks library constant)"""
    try:
        return (proxy_type, string_to_socks_constant_map[proxy_type])
    except KeyError:
        # Allow the socks library constants to be used directly
        try:
            return (socks_constant_to_string_map[proxy_type], proxy_type)
        except KeyError:
            raise ValueError("Invalid Proxy Type")


def _derive_default_proxy_port(proxy_type):
    if proxy_type == "HTTP":
        return 8080
    else:
        return 1080


def _sanitize_timeout(timeout):
    try:
        timeout = float(timeout)
    except (ValueError, TypeError):
        raise TypeError("Invalid type for 'timeout'. Must be a numeric value.")

    if timeout <= 0:
        raise ValueError("'timeout' must be greater than 0")

    return timeout


def _sanitize_max_attempts(max_attempts):
    if not isinstance(max_attempts, int) or isinstance(max_attempts, bool):
        raise TypeError("Invalid type for 'max_attempts'. Must be an integer.")

    if max_attempts < 1:
        raise ValueError("'max_attempts' must be at least 1")

    return max_attempts


def _sanitize_non_negative(name, value):
    try:
        value = float(value)
    except (ValueError, TypeError):
        raise TypeError("Invalid type for '{}'. Must be a numeric value.".format(name))

    if value < 0:
        raise ValueError("'{}' cannot be negative".format(name))

    return value


def _sanitize_property_names(property_names):
    if property_names is None:
        return None
    if isinstance(property_names, str):
        raise TypeError("'property_names' must be a list of strings, not a string")
    property_names = list(property_names)
    if not all(isinstance(name, str) and name for name in property_names):
        raise ValueError("'property_names' must only contain non-empty strings")
    return property_names
