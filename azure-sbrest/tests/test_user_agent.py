# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import platform
import pytest
from azure.sbrest import user_agent
from azure.sbrest.constant import VERSION, SERVICEBUS_IDENTIFIER

logging.basicConfig(level=logging.DEBUG)

check_agent_format = "{identifier}/{version}({python_runtime};{os_type} {os_release};{architecture})"


@pytest.mark.describe("get_servicebus_user_agent()")
class TestGetServiceBusUserAgent(object):
    @pytest.mark.it(
        "Returns a user agent string formatted for Service Bus, containing python version, operating system and architecture of the system"
    )
    def test_get_user_agent(self):
        expected_part_agent = check_agent_format.format(
            identifier=SERVICEBUS_IDENTIFIER,
            version=VERSION,
            python_runtime=platform.python_version(),
            os_type=platform.system(),
            os_release=platform.version(),
            architecture=platform.machine(),
        )
        assert user_agent.get_servicebus_user_agent() == expected_part_agent

    @pytest.mark.it("Starts with the library identifier and version")
    def test_prefix(self):
        assert user_agent.get_servicebus_user_agent().startswith(
            "{}/{}(".format(SERVICEBUS_IDENTIFIER, VERSION)
        )
