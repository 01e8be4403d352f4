# --------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import random
import ssl
import time
from typing import Optional
import requests  # type: ignore
from .config import ClientConfig, RetryPolicy
from .exceptions import InvalidURL, TransportError
from .request_builder import ServiceBusRequest

logger = logging.getLogger(__name__)

# Failures where the request may not have reached Service Bus, or the response never arrived.
# Any completed response, regardless of status, is returned to the caller instead.
TRANSIENT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)

# Failures in the request itself, which no amount of retrying will fix
INVALID_URL_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)


class HTTPTransport:
    """
    A wrapper class that sends Service Bus requests over HTTPS, retrying transient failures.

    The transport holds no state for individual requests, so it can be shared between threads.
    """

    def __init__(self, client_config: ClientConfig) -> None:
        """
        Constructor to instantiate an HTTP transport.

        :param client_config: The config object for the client
        :type client_config: :class:`ClientConfig`
        """
        self._timeout = client_config.timeout
        self._retry_policy = client_config.retry_policy
        self._server_verification_cert = client_config.server_verification_cert
        self._proxies = format_proxies(client_config.proxy_options)
        self._http_adapter = self._create_http_adapter()
        self._session = self._create_session()

    def _create_http_adapter(self) -> requests.adapters.HTTPAdapter:
        """
        This method creates a custom HTTPAdapter for use with a requests library session.
        It will allow for use of a custom configured SSL context.
        """
        ssl_context = self._create_ssl_context()

        class CustomSSLContextHTTPAdapter(requests.adapters.HTTPAdapter):
            def init_poolmanager(self, *args, **kwargs):
                kwargs["ssl_context"] = ssl_context
                return super().init_poolmanager(*args, **kwargs)

            def proxy_manager_for(self, *args, **kwargs):
                kwargs["ssl_context"] = ssl_context
                return super().proxy_manager_for(*args, **kwargs)

        return CustomSSLContextHTTPAdapter()

    def _create_ssl_context(self) -> ssl.SSLContext:
        """
        This method creates the SSLContext object used to authenticate the connection.
        """
        logger.debug("creating a SSL context")
        ssl_context = ssl.SSLContext(protocol=ssl.PROTOCOL_TLS_CLIENT)
        ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2

        if self._server_verification_cert:
            ssl_context.load_verify_locations(cadata=self._server_verification_cert)
        else:
            ssl_context.load_default_certs()

        ssl_context.verify_mode = ssl.CERT_REQUIRED
        ssl_context.check_hostname = True

        return ssl_context

    def _create_session(self) -> requests.Session:
        """Create the session shared by all requests, so that connections are pooled"""
        session = requests.Session()
        session.mount("https://", self._http_adapter)
        return session

    def close(self) -> None:
        """Close all pooled connections"""
        logger.debug("Closing HTTP session")
        self._session.close()

    def execute(
        self, request: ServiceBusRequest, timeout: Optional[float] = None
    ) -> requests.Response:
        """
        Send a request to Service Bus and return the response, retrying transient failures.

        :param request: The request to send
        :type request: :class:`ServiceBusRequest`
        :param float timeout: Time allowed for each attempt, in seconds. If not provided, the
            timeout of the client config is used. It bounds connecting and each wait for data
            from Service Bus, not the total duration of the attempt: a response that keeps
            arriving in small pieces can take longer to complete.

        :returns: The response, whatever its status code
        :rtype: :class:`requests.Response`

        :raises: :class:`TransportError` if every attempt failed transiently
        :raises: :class:`InvalidURL` if the request URL cannot be requested
        """
        if timeout is None:
            timeout = self._timeout
        max_attempts = self._retry_policy.max_attempts

        attempt = 1
        while True:
            logger.info(
                "sending https {} request to {} (attempt {} of {})".format(
                    request.method, request.url, attempt, max_attempts
                )
            )
            try:
                # NOTE: TLS configuration is not set here, as it is set via the HTTPAdapter
                # that was mounted at session level.
                response = self._session.request(
                    request.method,
                    request.url,
                    data=request.body,
                    headers=request.headers,
                    proxies=self._proxies,
                    timeout=timeout,
                )
            except INVALID_URL_ERRORS as e:
                raise InvalidURL("Unable to request URL: {}".format(request.url)) from e
            except requests.exceptions.SSLError as e:
                # A certificate failure will not go away on retry
                raise TransportError("TLS handshake with Service Bus failed") from e
            except TRANSIENT_ERRORS as e:
                if attempt >= max_attempts:
                    logger.warning(
                        "{} request to {} failed after {} attempts".format(
                            request.method, request.url, attempt
                        )
                    )
                    raise TransportError(
                        "Unable to reach Service Bus after {} attempts".format(attempt)
                    ) from e
                delay = apply_jitter(self._retry_policy.get_delay(attempt), self._retry_policy)
                logger.info(
                    "{} request attempt {} raised {}. Sleeping for {:.2f}s and trying again".format(
                        request.method, attempt, type(e).__name__, delay
                    )
                )
                time.sleep(delay)
                attempt += 1
            except requests.exceptions.RequestException as e:
                raise TransportError("Unexpected HTTPS failure") from e
            else:
                logger.debug(
                    "received response {} {} for {} request".format(
                        response.status_code, response.reason, request.method
                    )
                )
                return response


def apply_jitter(delay: float, retry_policy: RetryPolicy) -> float:
    """Randomly spread a delay, so that clients failing together do not retry together"""
    min_value = delay * (1 - retry_policy.jitter_down)
    max_value = delay * (1 + retry_policy.jitter_up)
    return random.uniform(min_value, max_value)


def format_proxies(proxy_options):
    """
    Format the data from the proxy_options object into a format for use with the requests library
    """
    proxies = {}
    if proxy_options:
        # Basic address/port formatting
        proxy = "{address}:{port}".format(
            address=proxy_options.proxy_address, port=proxy_options.proxy_port
        )
        # Add credentials if necessary
        if proxy_options.proxy_username and proxy_options.proxy_password:
            auth = "{username}:{password}".format(
                username=proxy_options.proxy_username, password=proxy_options.proxy_password
            )
            proxy = auth + "@" + proxy
        # Set proxy for use on HTTP or HTTPS connections
        if proxy_options.proxy_type == "HTTP":
            proxies["http"] = "http://" + proxy
            proxies["https"] = "http://" + proxy
        elif proxy_options.proxy_type == "SOCKS4":
            proxies["http"] = "socks4://" + proxy
            proxies["https"] = "socks4://" + proxy
        elif proxy_options.proxy_type == "SOCKS5":
            proxies["http"] = "socks5://" + proxy
            proxies["https"] = "socks5://" + proxy
        else:
            # This should be unreachable due to validation on the ProxyOptions object
            raise ValueError("Invalid proxy type: {}".format(proxy_options.proxy_type))

    return proxies
