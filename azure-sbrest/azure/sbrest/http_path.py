# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the addressing of Service Bus entities.

Queues and topic/subscription pairs support the same operations, and only differ in the paths
used to reach them, so both are represented by an EntityAddress holding those paths.
"""

import logging
import urllib.parse
from . import constant

logger = logging.getLogger(__name__)


class EntityAddress:
    def __init__(self, send_path: str, receive_path: str, description: str) -> None:
        """
        :param str send_path: The path messages are sent to
        :param str receive_path: The path messages are received from (without the "head" segment)
        :param str description: A human readable description of the entity, for logging
        """
        self.send_path = send_path
        self.receive_path = receive_path
        self.description = description

    def __repr__(self) -> str:
        return "EntityAddress({})".format(self.description)

    def get_send_path(self) -> str:
        """
        :return: The path for sending a message to the entity. It is of the format
        /{entity}/messages/
        """
        return self.send_path

    def get_head_path(self, timeout: int) -> str:
        """
        :param int timeout: Seconds the broker waits for a message to become available
        :return: The path for receiving the message at the head of the entity. It is of the format
        /{entity}/messages/head?timeout=$timeout
        """
        return "{path}head?{param}={timeout}".format(
            path=self.receive_path, param=constant.PARAM_TIMEOUT, timeout=int(timeout)
        )


def queue_address(queue_name: str) -> EntityAddress:
    """
    :return: The address of a queue. Messages are sent to and received from
    /uri_encode($queue_name)/messages/
    """
    if not queue_name:
        raise ValueError("Queue name is required")
    path = "/{queue}/messages/".format(queue=_encode(queue_name))
    return EntityAddress(
        send_path=path, receive_path=path, description="queue '{}'".format(queue_name)
    )


def subscription_address(topic_name: str, subscription_name: str) -> EntityAddress:
    """
    :return: The address of a topic/subscription pair. Messages are sent to
    /uri_encode($topic_name)/messages/ and received from
    /uri_encode($topic_name)/subscriptions/uri_encode($subscription_name)/messages/
    """
    if not topic_name:
        raise ValueError("Topic name is required")
    if not subscription_name:
        raise ValueError("Subscription name is required")
    return EntityAddress(
        send_path="/{topic}/messages/".format(topic=_encode(topic_name)),
        receive_path="/{topic}/subscriptions/{subscription}/messages/".format(
            topic=_encode(topic_name), subscription=_encode(subscription_name)
        ),
        description="topic '{}' subscription '{}'".format(topic_name, subscription_name),
    )


def _encode(name: str) -> str:
    # Entity names may be hierarchical (e.g. "orders/eu"), so the separator is kept
    return urllib.parse.quote(name, safe="/")
