# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
from typing import Dict, Optional
from typing_extensions import TypedDict


CustomProperties = Dict[str, str]


class BrokerProperties(TypedDict, total=False):
    """The JSON object carried by the BrokerProperties header of a received message"""

    MessageId: str
    DeliveryCount: int
    EnqueuedSequenceNumber: int
    EnqueuedTimeUtc: Optional[str]
    LockToken: str
    LockedUntilUtc: Optional[str]
    PartitionKey: str
    SequenceNumber: int
    State: str
    TimeToLive: float
