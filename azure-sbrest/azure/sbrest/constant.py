# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module defines constants for use across the azure-sbrest package
"""

VERSION = "0.1.0"
SERVICEBUS_IDENTIFIER = "azure-sbrest-py"
SERVICEBUS_API_VERSION = "2016-07"

# SAS tokens are regenerated for every request, so a short lifetime is enough
SASTOKEN_TTL = 300

# Seconds allowed for a single HTTP attempt
DEFAULT_HTTP_TIMEOUT = 30
# Seconds the broker holds a receive request open waiting for a message
DEFAULT_RECEIVE_TIMEOUT = 60

# Header Definitions
HEADER_ACCEPT = "Accept"
HEADER_AUTHORIZATION = "Authorization"
HEADER_USER_AGENT = "User-Agent"
HEADER_BROKER_PROPERTIES = "BrokerProperties"
HEADER_LOCATION = "Location"

# Query parameter definitions
PARAM_API_VERSION = "api-version"
PARAM_TIMEOUT = "timeout"
