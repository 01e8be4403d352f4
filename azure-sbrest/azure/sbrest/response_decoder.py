# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module decodes Service Bus responses into Messages"""

import datetime
import email.utils
import json
import logging
from typing import Any, Callable, Optional, cast
import requests  # type: ignore
from .custom_typing import BrokerProperties
from .exceptions import DecodeError
from .models import Message, ZERO_DATETIME, PropertyPolicy, CaptureAllPropertyPolicy
from . import constant

logger = logging.getLogger(__name__)


def decode_response(
    response: requests.Response,
    property_policy: Optional[PropertyPolicy] = None,
    locked: bool = True,
) -> Message:
    """Create a Message from a Service Bus response carrying one

    :param response: The response to a receive request
    :type response: :class:`requests.Response`
    :param property_policy: The policy used to recover custom properties from the response
        headers (default capture-all)
    :type property_policy: :class:`PropertyPolicy`
    :param bool locked: Whether the message was received under a lock (peek-lock). Messages
        received without one (destructive read) get no lock Location or lock token.

    :returns: The received Message
    :raises: :class:`DecodeError` if the BrokerProperties header is missing or invalid
    """
    if property_policy is None:
        property_policy = CaptureAllPropertyPolicy()

    raw_props = response.headers.get(constant.HEADER_BROKER_PROPERTIES)
    if raw_props is None:
        raise DecodeError("Response is missing the {} header".format(constant.HEADER_BROKER_PROPERTIES))
    broker_properties = parse_broker_properties(raw_props)

    message = Message(body=response.content or b"")
    apply_broker_properties(message, broker_properties)
    if locked:
        message.location = response.headers.get(constant.HEADER_LOCATION)
    else:
        message.lock_token = ""
    message.custom_properties = property_policy.extract(response.headers)

    logger.debug(
        "Decoded message {} (sequence number {})".format(message.message_id, message.sequence_number)
    )
    return message


def parse_broker_properties(raw_props: str) -> BrokerProperties:
    """Parse the JSON object carried by a BrokerProperties header

    :raises: :class:`DecodeError` if the value is not a JSON object
    """
    try:
        props = json.loads(raw_props)
    except ValueError as e:
        raise DecodeError("BrokerProperties header is not valid JSON") from e
    if not isinstance(props, dict):
        raise DecodeError("BrokerProperties header is not a JSON object")
    return cast(BrokerProperties, props)


def apply_broker_properties(message: Message, props: BrokerProperties) -> None:
    """Set the broker assigned fields of a Message. Fields absent from props keep their defaults."""
    message.message_id = _get(props, "MessageId", str, message.message_id)
    message.delivery_count = _get(props, "DeliveryCount", int, message.delivery_count)
    message.enqueued_sequence_number = _get(
        props, "EnqueuedSequenceNumber", int, message.enqueued_sequence_number
    )
    message.enqueued_time_utc = parse_datetime(props.get("EnqueuedTimeUtc"))
    message.lock_token = _get(props, "LockToken", str, message.lock_token)
    message.locked_until_utc = parse_datetime(props.get("LockedUntilUtc"))
    message.partition_key = _get(props, "PartitionKey", str, message.partition_key)
    message.sequence_number = _get(props, "SequenceNumber", int, message.sequence_number)
    message.state = _get(props, "State", str, message.state)
    message.time_to_live = _get(props, "TimeToLive", float, message.time_to_live)


def parse_datetime(value: Optional[str]) -> datetime.datetime:
    """Parse an RFC 1123 timestamp (e.g. "Wed, 02 Mar 2016 22:16:04 GMT") into a UTC datetime.

    A missing, null or empty timestamp is returned as ZERO_DATETIME.

    :raises: :class:`DecodeError` if the timestamp cannot be parsed
    """
    if value is None:
        return ZERO_DATETIME
    if not isinstance(value, str):
        raise DecodeError("Invalid timestamp in BrokerProperties: {!r}".format(value))
    value = value.strip('"').strip()
    if not value or value == "null":
        return ZERO_DATETIME
    try:
        dt = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        raise DecodeError("Invalid timestamp in BrokerProperties: {!r}".format(value)) from e
    if dt.tzinfo is None:
        # RFC 1123 timestamps from Service Bus are always GMT
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def _get(props: BrokerProperties, key: str, convert: Callable[[Any], Any], default: Any) -> Any:
    value = props.get(key)
    if value is None:
        return default
    try:
        return convert(value)
    except (TypeError, ValueError) as e:
        raise DecodeError("Invalid value for {} in BrokerProperties: {!r}".format(key, value)) from e
