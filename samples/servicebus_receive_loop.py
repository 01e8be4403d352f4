# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This sample demonstrates receiving messages from a queue in a loop, unlocking any message
that fails processing so that it can be received again"""

import logging
import os
from azure.sbrest import ServiceBusClient, RetryPolicy, ProtocolError

logging.basicConfig(level=logging.INFO)

CONNECTION_STRING = os.getenv("SERVICEBUS_CONNECTION_STRING")
QUEUE_NAME = os.getenv("SERVICEBUS_QUEUE_NAME", "my-test-queue")
TOTAL_MESSAGES_RECEIVED = 0


def process(msg):
    if not msg.body:
        raise ValueError("Empty message")
    print("Processing message {}: {}".format(msg.message_id, msg))


def main():
    global TOTAL_MESSAGES_RECEIVED
    print("Starting receive loop sample")
    print("Press Ctrl-C to exit")
    with ServiceBusClient.create_queue_client_from_connection_string(
        CONNECTION_STRING, QUEUE_NAME, retry_policy=RetryPolicy(max_attempts=6, max_delay=30)
    ) as client:
        while True:
            msg = client.peek_lock(timeout=20)
            if msg is None:
                continue
            TOTAL_MESSAGES_RECEIVED += 1
            try:
                process(msg)
            except ValueError as e:
                print("Processing failed ({}). Unlocking message".format(e))
                client.unlock(msg)
                continue
            try:
                client.delete(msg)
            except ProtocolError as e:
                # The lock expired, and the message will be delivered again
                print("Could not delete message: {}".format(e))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("User initiated exit. Exiting")
    finally:
        print("Received {} messages in total".format(TOTAL_MESSAGES_RECEIVED))
