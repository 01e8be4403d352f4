# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This sample demonstrates sending a message to a queue, then peek-locking and deleting it"""

import os
import time
from azure.sbrest import ServiceBusClient, Message, ServiceBusClientError

CONNECTION_STRING = os.getenv("SERVICEBUS_CONNECTION_STRING")
QUEUE_NAME = os.getenv("SERVICEBUS_QUEUE_NAME", "my-test-queue")


def main():
    print("Starting queue sample")
    with ServiceBusClient.create_queue_client_from_connection_string(
        CONNECTION_STRING, QUEUE_NAME
    ) as client:
        message_text = "My Queue Message"
        print("Sending message: {}".format(message_text))
        client.send(Message(message_text))
        print("Send Complete")

        time.sleep(3)

        msg = client.peek_lock(timeout=30)
        if msg is None:
            print("No message received")
            return
        print("Message received: {}".format(msg))

        client.delete(msg)
        print("Message deleted")


if __name__ == "__main__":
    try:
        main()
    except ServiceBusClientError as e:
        print("Sample failed: {}".format(e))
