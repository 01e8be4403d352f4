# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module defines an abstract SigningMechanism, as well as the Shared Access Key
implementation of it
"""

import abc
import base64
import hashlib
import hmac
from typing import Union


class SigningMechanism(abc.ABC):
    @abc.abstractmethod
    def sign(self, data_str: Union[str, bytes]) -> str:
        pass


class SharedAccessKeySigningMechanism(SigningMechanism):
    def __init__(self, key: Union[str, bytes]) -> None:
        """
        A mechanism that signs data using a Service Bus Shared Access Key

        NOTE: Unlike IoT Hub symmetric keys, a Service Bus Shared Access Key is used as-is
        for HMAC, and is NOT base64 decoded first.

        :param key: Shared Access Key
        :type key: str or bytes
        """
        if isinstance(key, str):
            key = key.encode("utf-8")
        if not isinstance(key, bytes) or not key:
            raise ValueError("Invalid Shared Access Key")
        self._signing_key = key

    def sign(self, data_str: Union[str, bytes]) -> str:
        """
        Sign a data string with the Shared Access Key and the HMAC-SHA256 algorithm.

        :param data_str: Data string to be signed
        :type data_str: str or bytes

        :returns: The base64 encoded signed data
        :rtype: str
        """
        if isinstance(data_str, str):
            data_str = data_str.encode("utf-8")

        # Derive signature via HMAC-SHA256 algorithm
        try:
            hmac_digest = hmac.HMAC(
                key=self._signing_key, msg=data_str, digestmod=hashlib.sha256
            ).digest()
            signed_data = base64.b64encode(hmac_digest)
        except TypeError:
            raise ValueError("Unable to sign string using the provided Shared Access Key")
        # Convert from bytes to string
        return signed_data.decode("utf-8")
