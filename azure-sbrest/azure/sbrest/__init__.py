""" Azure Service Bus REST Library

This library provides a client for sending and receiving messages through Azure Service Bus
queues and topic/subscription pairs over HTTPS, using Shared Access Signature authentication.
"""

from .client import ServiceBusClient  # noqa: F401
from .config import ClientConfig, ProxyOptions, RetryPolicy  # noqa: F401
from .credential import ServiceBusCredential  # noqa: F401
from .http_path import EntityAddress, queue_address, subscription_address  # noqa: F401
from .sastoken import SasTokenError  # noqa: F401
from .exceptions import (  # noqa: F401
    ServiceBusClientError,
    ConfigError,
    InvalidURL,
    TransportError,
    ProtocolError,
    DecodeError,
)
from .models import (  # noqa: F401
    Message,
    PropertyPolicy,
    AllowListPropertyPolicy,
    CaptureAllPropertyPolicy,
)
from . import models  # noqa: F401
