# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This sample demonstrates publishing a message with custom properties to a topic, then
receiving it from a subscription"""

import os
import time
from azure.sbrest import ServiceBusClient, Message, ServiceBusClientError

CONNECTION_STRING = os.getenv("SERVICEBUS_CONNECTION_STRING")
TOPIC_NAME = os.getenv("SERVICEBUS_TOPIC_NAME", "my-test-topic")
SUBSCRIPTION_NAME = os.getenv("SERVICEBUS_SUBSCRIPTION_NAME", "my-test-subscription")


def main():
    print("Starting pubsub sample")
    with ServiceBusClient.create_subscription_client_from_connection_string(
        CONNECTION_STRING, TOPIC_NAME, SUBSCRIPTION_NAME, property_names=["Priority"]
    ) as client:
        message = Message("My PubSub Message", {"Priority": "High"})
        print("Publishing message: {}".format(message))
        client.send(message)
        print("Publish Complete")

        time.sleep(3)

        msg = client.peek_lock(timeout=30)
        if msg is None:
            print("No message received")
            return
        print("Message received: {}".format(msg))
        print("Priority: {}".format(msg.custom_properties.get("Priority")))

        # Processing might outlast the lock, so extend it before completing
        client.renew_lock(msg)
        client.delete(msg)
        print("Message deleted")


if __name__ == "__main__":
    try:
        main()
    except ServiceBusClientError as e:
        print("Sample failed: {}".format(e))
