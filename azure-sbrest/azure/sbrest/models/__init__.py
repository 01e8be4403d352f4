"""Azure Service Bus Models

This package provides the models for messages sent to and received from Service Bus.
"""

from .message import Message, ZERO_DATETIME  # noqa: F401
from .properties import (  # noqa: F401
    PropertyPolicy,
    AllowListPropertyPolicy,
    CaptureAllPropertyPolicy,
    create_property_policy,
)
