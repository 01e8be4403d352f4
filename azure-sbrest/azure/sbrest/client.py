# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the client for exchanging messages with a Service Bus queue or
topic/subscription over HTTPS.
"""
import logging
from typing import Any, Dict, List, Optional, Union
import requests  # type: ignore
from typing_extensions import Self
from .config import ClientConfig
from .credential import ServiceBusCredential
from .exceptions import InvalidURL, ProtocolError
from .http_path import EntityAddress, queue_address, subscription_address
from .http_transport import HTTPTransport
from .models import Message, create_property_policy
from . import constant
from . import request_builder
from . import response_decoder
from . import user_agent

logger = logging.getLogger(__name__)

# Operation names, as reported in errors
OP_SEND = "send"
OP_PEEK_LOCK = "peek_lock"
OP_UNLOCK = "unlock"
OP_RENEW_LOCK = "renew_lock"
OP_DESTRUCTIVE_READ = "destructive_read"
OP_DELETE = "delete"

SEND_SUCCESS_CODES = [200, 201]
RECEIVE_SUCCESS_CODES = [200, 201]
LOCK_SUCCESS_CODES = [200]
# Returned when no message became available before the receive timeout elapsed
NO_MESSAGE_CODE = 204


def _validate_kwargs(**kwargs) -> None:
    """Helper function to validate user provided kwargs.
    Raises TypeError if an invalid option has been provided"""
    valid_kwargs = [
        "timeout",
        "retry_policy",
        "proxy_options",
        "server_verification_cert",
        "product_info",
        "property_names",
    ]

    for kwarg in kwargs:
        if kwarg not in valid_kwargs:
            raise TypeError("Unsupported keyword argument: '{}'".format(kwarg))


class ServiceBusClient:
    """A client for a Service Bus queue, or a topic/subscription pair.

    All operations block until complete. Transient network failures are retried according to
    the retry policy of the config; unexpected responses from Service Bus are raised
    immediately as :class:`ProtocolError`.
    """

    def __init__(self, client_config: ClientConfig, address: EntityAddress) -> None:
        """Initializer for a ServiceBusClient.

        This initializer should not be called directly.
        Instead, use one of the 'create_' classmethods to instantiate

        :param client_config: The config object for the client
        :type client_config: :class:`ClientConfig`
        :param address: The address of the queue or topic/subscription
        :type address: :class:`EntityAddress`
        """
        self._credential = client_config.credential
        self._address = address
        self._timeout = client_config.timeout
        self._user_agent_string = user_agent.get_servicebus_user_agent() + client_config.product_info
        self._property_policy = create_property_policy(client_config.property_names)
        self._transport = HTTPTransport(client_config)
        logger.debug(
            "Created Service Bus client for {} using {}".format(address.description, self._property_policy)
        )

    @classmethod
    def create_queue_client_from_connection_string(
        cls, connection_string: str, queue_name: str, **kwargs: Any
    ) -> Self:
        """
        Instantiate a client for a Service Bus queue using a connection string.

        :param str connection_string: The connection string for the Service Bus namespace.
        :param str queue_name: The name of the queue.

        :param float timeout: Time allowed for a single HTTP attempt, in seconds.
        :param retry_policy: Retry behavior for transient network failures.
        :type retry_policy: :class:`azure.sbrest.RetryPolicy`
        :param proxy_options: Options for sending traffic through proxy servers.
        :type proxy_options: :class:`azure.sbrest.ProxyOptions`
        :param str server_verification_cert: Configuration Option. The trusted certificate
            chain. Necessary when using connecting to an endpoint which has a non-standard
            root of trust, such as a protocol gateway.
        :param str product_info: Configuration Option. Default value is empty string. The
            string contains arbitrary product info which is appended to the user agent string.
        :param list property_names: Names of the custom properties to recover from received
            messages. If not provided, all non-reserved headers are recovered.

        :raises: :class:`azure.sbrest.exceptions.ConfigError` if the connection string is
            invalid
        :raises: TypeError if given an unsupported parameter.

        :returns: An instance of a Service Bus client for the queue.
        """
        _validate_kwargs(**kwargs)
        credential = ServiceBusCredential.from_connection_string(connection_string)
        client_config = ClientConfig(credential=credential, **kwargs)
        return cls(client_config, queue_address(queue_name))

    @classmethod
    def create_subscription_client_from_connection_string(
        cls, connection_string: str, topic_name: str, subscription_name: str, **kwargs: Any
    ) -> Self:
        """
        Instantiate a client for a Service Bus topic and one of its subscriptions using a
        connection string. Messages are sent to the topic, and received from the subscription.

        :param str connection_string: The connection string for the Service Bus namespace.
        :param str topic_name: The name of the topic.
        :param str subscription_name: The name of the subscription.

        Accepts the same optional keyword arguments as
        :meth:`create_queue_client_from_connection_string`.

        :raises: :class:`azure.sbrest.exceptions.ConfigError` if the connection string is
            invalid
        :raises: TypeError if given an unsupported parameter.

        :returns: An instance of a Service Bus client for the topic/subscription.
        """
        _validate_kwargs(**kwargs)
        credential = ServiceBusCredential.from_connection_string(connection_string)
        client_config = ClientConfig(credential=credential, **kwargs)
        return cls(client_config, subscription_address(topic_name, subscription_name))

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the pooled connections of the client"""
        self._transport.close()

    @property
    def address(self) -> EntityAddress:
        return self._address

    def send(self, message: Union[Message, bytes, str]) -> None:
        """Send a message to the queue or topic.

        :param message: The message to send. If not a Message object, it will be used as the
            body of one.
        :type message: :class:`azure.sbrest.Message` or bytes or str

        :raises: :class:`azure.sbrest.exceptions.ProtocolError` if Service Bus responds with
            a failed status
        :raises: :class:`azure.sbrest.exceptions.TransportError` if Service Bus could not be
            reached
        """
        if not isinstance(message, Message):
            message = Message(message)
        logger.info("Sending message to {}...".format(self._address.description))
        url = request_builder.build_url(self._credential.endpoint, self._address.get_send_path())
        response = self._execute(
            url, "POST", body=message.body, properties=message.custom_properties
        )
        self._check_response(OP_SEND, response, SEND_SUCCESS_CODES)
        logger.info("Successfully sent message to {}".format(self._address.description))

    def peek_lock(self, timeout: int = constant.DEFAULT_RECEIVE_TIMEOUT) -> Optional[Message]:
        """Receive the message at the head of the queue or subscription, locking it without
        removing it. The message must then be deleted, unlocked or have its lock renewed.

        :param int timeout: Seconds to wait for a message to become available

        :returns: The locked message, or None if no message became available
        :rtype: :class:`azure.sbrest.Message`

        :raises: :class:`azure.sbrest.exceptions.ProtocolError` if Service Bus responds with
            a failed status
        :raises: :class:`azure.sbrest.exceptions.DecodeError` if the message cannot be decoded
        :raises: :class:`azure.sbrest.exceptions.TransportError` if Service Bus could not be
            reached
        """
        return self._receive(OP_PEEK_LOCK, "POST", timeout)

    def destructive_read(
        self, timeout: int = constant.DEFAULT_RECEIVE_TIMEOUT
    ) -> Optional[Message]:
        """Receive and remove the message at the head of the queue or subscription.
        There is no lock, so the message is lost if it cannot be processed.

        :param int timeout: Seconds to wait for a message to become available

        :returns: The message, or None if no message became available
        :rtype: :class:`azure.sbrest.Message`

        :raises: :class:`azure.sbrest.exceptions.ProtocolError` if Service Bus responds with
            a failed status
        :raises: :class:`azure.sbrest.exceptions.DecodeError` if the message cannot be decoded
        :raises: :class:`azure.sbrest.exceptions.TransportError` if Service Bus could not be
            reached
        """
        return self._receive(OP_DESTRUCTIVE_READ, "DELETE", timeout)

    def unlock(self, message: Message) -> None:
        """Release the lock on a peek-locked message, making it available for receiving again.

        :param message: A message received with :meth:`peek_lock`
        :type message: :class:`azure.sbrest.Message`

        :raises: :class:`azure.sbrest.exceptions.InvalidURL` if the message is not locked
        :raises: :class:`azure.sbrest.exceptions.ProtocolError` if Service Bus responds with
            a failed status
        :raises: :class:`azure.sbrest.exceptions.TransportError` if Service Bus could not be
            reached
        """
        self._lock_operation(OP_UNLOCK, "PUT", message)

    def renew_lock(self, message: Message) -> None:
        """Extend the lock on a peek-locked message.

        :param message: A message received with :meth:`peek_lock`
        :type message: :class:`azure.sbrest.Message`

        :raises: :class:`azure.sbrest.exceptions.InvalidURL` if the message is not locked
        :raises: :class:`azure.sbrest.exceptions.ProtocolError` if Service Bus responds with
            a failed status
        :raises: :class:`azure.sbrest.exceptions.TransportError` if Service Bus could not be
            reached
        """
        self._lock_operation(OP_RENEW_LOCK, "POST", message)

    def delete(self, message: Message) -> None:
        """Complete a peek-locked message, removing it from the queue or subscription.

        :param message: A message received with :meth:`peek_lock`
        :type message: :class:`azure.sbrest.Message`

        :raises: :class:`azure.sbrest.exceptions.InvalidURL` if the message is not locked
        :raises: :class:`azure.sbrest.exceptions.ProtocolError` if Service Bus responds with
            a failed status, including when the message was already deleted
        :raises: :class:`azure.sbrest.exceptions.TransportError` if Service Bus could not be
            reached
        """
        self._lock_operation(OP_DELETE, "DELETE", message)

    def _receive(self, operation: str, method: str, timeout: int) -> Optional[Message]:
        timeout = _sanitize_receive_timeout(timeout)
        logger.info("Receiving message from {} ({})...".format(self._address.description, operation))
        url = request_builder.build_url(
            self._credential.endpoint, self._address.get_head_path(timeout)
        )
        # The broker holds the request open for up to the receive timeout, so the HTTP
        # attempt must be allowed to outlast it
        response = self._execute(url, method, attempt_timeout=timeout + self._timeout)
        try:
            if response.status_code == NO_MESSAGE_CODE:
                logger.info("No message available from {}".format(self._address.description))
                return None
            self._check_response(operation, response, RECEIVE_SUCCESS_CODES)
            message = response_decoder.decode_response(
                response, self._property_policy, locked=(operation == OP_PEEK_LOCK)
            )
        finally:
            response.close()
        logger.info(
            "Received message {} from {}".format(message.message_id, self._address.description)
        )
        return message

    def _lock_operation(self, operation: str, method: str, message: Message) -> None:
        if message.location is None:
            raise InvalidURL(
                "Cannot {}: message has no lock Location (was it received with peek_lock?)".format(
                    operation
                )
            )
        url = request_builder.validate_url(message.location)
        logger.info("Sending {} request for message {}...".format(operation, message.message_id))
        response = self._execute(url, method)
        self._check_response(operation, response, LOCK_SUCCESS_CODES)
        logger.info("Successfully completed {} for message {}".format(operation, message.message_id))

    def _execute(
        self,
        url: str,
        method: str,
        body: Optional[bytes] = None,
        properties: Optional[Dict[str, str]] = None,
        attempt_timeout: Optional[float] = None,
    ) -> requests.Response:
        request = request_builder.build_request(
            self._credential,
            url,
            method,
            body=body,
            properties=properties,
            user_agent=self._user_agent_string,
        )
        return self._transport.execute(request, timeout=attempt_timeout)

    def _check_response(
        self, operation: str, response: requests.Response, success_codes: List[int]
    ) -> None:
        """Raise ProtocolError if the response status is not one of the success codes.
        The response is drained and closed either way; failed responses are never decoded."""
        # Reading the content releases the connection back to the pool
        response.content
        response.close()
        if response.status_code in success_codes:
            return
        logger.error(
            "Received failure response from Service Bus for {} ({} {})".format(
                operation, response.status_code, response.reason
            )
        )
        raise ProtocolError(operation, response.status_code, response.reason)


def _sanitize_receive_timeout(timeout):
    if not isinstance(timeout, int) or isinstance(timeout, bool):
        raise TypeError("Invalid type for 'timeout'. Must be an integer number of seconds.")
    if timeout < 0:
        raise ValueError("'timeout' cannot be negative")
    return timeout
