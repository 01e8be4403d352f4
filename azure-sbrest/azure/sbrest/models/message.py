# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains a class representing messages that are sent or received.
"""
import datetime
from typing import Mapping, Optional, Union
from ..custom_typing import CustomProperties

# Stands in for timestamps Service Bus did not provide
ZERO_DATETIME = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


class Message:
    """Represents a message to or from Service Bus

    :ivar bytes body: The data that constitutes the payload
    :ivar dict custom_properties: Dictionary of custom message properties
    :ivar str message_id: Identifier of the message, assigned by the broker if not set
    :ivar int delivery_count: Number of times the message has been delivered
    :ivar int enqueued_sequence_number: Sequence number assigned when the message was enqueued
    :ivar enqueued_time_utc: Date and time the message was enqueued
    :ivar str lock_token: Token of the lock held on the message (peek-lock only)
    :ivar locked_until_utc: Date and time the lock held on the message expires (peek-lock only)
    :ivar str partition_key: Partition key of the message
    :ivar int sequence_number: Sequence number assigned by the broker
    :ivar str state: State of the message (e.g. "Active")
    :ivar float time_to_live: Seconds the message lives for before it expires
    :ivar str location: URL of the locked message instance (peek-lock only)
    """

    def __init__(
        self,
        body: Union[bytes, str] = b"",
        custom_properties: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initializer for Message

        :param body: The data that constitutes the payload. Strings are UTF-8 encoded.
        :type body: bytes or str
        :param dict custom_properties: Dictionary of custom message properties
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body: bytes = bytes(body)
        self.custom_properties: CustomProperties = dict(custom_properties or {})

        # Broker properties
        self.message_id = ""
        self.delivery_count = 0
        self.enqueued_sequence_number = 0
        self.enqueued_time_utc = ZERO_DATETIME
        self.lock_token = ""
        self.locked_until_utc = ZERO_DATETIME
        self.partition_key = ""
        self.sequence_number = 0
        self.state = ""
        self.time_to_live = 0.0

        # Lock resource
        self.location: Optional[str] = None

    def __str__(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return "Message(message_id={!r}, sequence_number={}, locked={})".format(
            self.message_id, self.sequence_number, self.is_locked
        )

    @property
    def is_locked(self) -> bool:
        """True if the message was received with a lock that can be unlocked, renewed or deleted"""
        return self.location is not None
