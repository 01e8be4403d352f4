# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module is for creating agent strings for Service Bus."""

import platform
from .constant import VERSION, SERVICEBUS_IDENTIFIER

python_runtime = platform.python_version()
os_type = platform.system()
os_release = platform.version()
architecture = platform.machine()


def _get_common_user_agent():
    return "({python_runtime};{os_type} {os_release};{architecture})".format(
        python_runtime=python_runtime,
        os_type=os_type,
        os_release=os_release,
        architecture=architecture,
    )


def get_servicebus_user_agent():
    """
    Create the user agent for Service Bus
    """
    return "{servicebus_iden}/{version}{common}".format(
        servicebus_iden=SERVICEBUS_IDENTIFIER, version=VERSION, common=_get_common_user_agent()
    )
