"""Enumerations for sigenv."""

from enum import Enum


class KeyUsage(str, Enum):
    """What a key is for.

    Example:
        >>> KeyUsage.SIGNING.value
        'signing'
    """

    SIGNING = "signing"
    VERIFYING = "verifying"
