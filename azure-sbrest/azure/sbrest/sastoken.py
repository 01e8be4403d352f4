# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains tools for working with Shared Access Signature (SAS) Tokens"""

import logging
import time
import urllib.parse
from typing import Dict, List, Optional
from .credential import ServiceBusCredential
from .exceptions import ServiceBusClientError
from .signing_mechanism import SharedAccessKeySigningMechanism
from . import constant

logger = logging.getLogger(__name__)

REQUIRED_SASTOKEN_FIELDS: List[str] = ["sig", "se", "skn", "sr"]
TOKEN_FORMAT: str = "SharedAccessSignature sig={signature}&se={expiry}&skn={key_name}&sr={resource}"


class SasTokenError(ServiceBusClientError):
    """Error in SasToken"""

    pass


class SasToken:
    def __init__(self, sastoken_str: str) -> None:
        """Create a SasToken object from a SAS Token string
        :param str sastoken_str: The SAS Token string

        :raises: ValueError if SAS Token string is invalid
        """
        self._token_str: str = sastoken_str
        self._token_info: Dict[str, str] = _get_sastoken_info_from_string(sastoken_str)

    def __str__(self) -> str:
        return self._token_str

    def is_expired(self) -> bool:
        return time.time() >= self.expiry_time

    @property
    def expiry_time(self) -> float:
        # NOTE: Time is typically expressed in float in Python, even though a
        # SAS Token expiry time should be a whole number.
        return float(self._token_info["se"])

    @property
    def resource_uri(self) -> str:
        uri = self._token_info["sr"]
        return urllib.parse.unquote(uri)

    @property
    def signature(self) -> str:
        signature = self._token_info["sig"]
        return urllib.parse.unquote(signature)

    @property
    def key_name(self) -> str:
        return self._token_info["skn"]


def generate_sastoken(
    credential: ServiceBusCredential,
    resource_uri: str,
    ttl: int = constant.SASTOKEN_TTL,
    current_time: Optional[float] = None,
) -> SasToken:
    """Generate a new SasToken granting access to a resource

    The token depends only on the arguments, so a fresh one must be generated for every
    request - a token is rejected once its expiry has passed.

    :param credential: The credential whose Shared Access Key signs the token
    :type credential: :class:`ServiceBusCredential`
    :param str resource_uri: The URI of the resource the token grants access to
    :param int ttl: Time to live for the token, in seconds (default 300)
    :param float current_time: Time to generate the token at, in seconds since epoch
        (default now)

    :raises: SasTokenError if the token cannot be generated
    """
    if current_time is None:
        current_time = time.time()
    expiry_time = int(round(current_time + ttl))
    url_encoded_uri = urllib.parse.quote(resource_uri, safe="")
    message = url_encoded_uri + "\n" + str(expiry_time)
    try:
        signing_mechanism = SharedAccessKeySigningMechanism(credential.access_key)
        signature = signing_mechanism.sign(message)
    except ValueError as e:
        raise SasTokenError("Unable to generate SasToken") from e
    url_encoded_signature = urllib.parse.quote(signature, safe="")
    token_str = TOKEN_FORMAT.format(
        signature=url_encoded_signature,
        expiry=str(expiry_time),
        key_name=credential.key_name,
        resource=url_encoded_uri,
    )
    logger.debug("Generated SAS Token for {} expiring at {}".format(resource_uri, expiry_time))
    return SasToken(token_str)


def _get_sastoken_info_from_string(sastoken_string: str) -> Dict[str, str]:
    """Given a SAS Token string, return a dictionary of it's keys and values"""
    pieces = sastoken_string.split("SharedAccessSignature ")
    if len(pieces) != 2:
        raise ValueError("Invalid SAS Token string: Not a SAS Token ")

    # Get sastoken info as dictionary
    try:
        sastoken_info = {}
        for sub in pieces[1].split("&"):
            key, value = sub.split("=", 1)
            sastoken_info[key.strip()] = value.strip()
    except ValueError as e:
        raise ValueError("Invalid SAS Token string: Incorrectly formatted") from e

    # Validate that all required fields are present
    if not all(key in sastoken_info for key in REQUIRED_SASTOKEN_FIELDS):
        raise ValueError("Invalid SAS Token string: Not all required fields present")

    # Warn if extraneous fields are present
    if not all(key in REQUIRED_SASTOKEN_FIELDS for key in sastoken_info):
        logger.warning("Unexpected fields present in SAS Token")

    return sastoken_info
