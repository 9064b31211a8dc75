"""sigenv: typed signed envelopes.

Attach strongly typed data to an Ed25519 signature, together with a signing
timestamp, an optional expiration and an untrusted comment::

    >>> from sigenv import SignatureBuilder, SigningKey
    >>>
    >>> key = SigningKey[str].generate().with_comment("release key")
    >>> signature = SignatureBuilder({"name": "Toto", "age": 42}).sign(key)
    >>> message = signature.verify(key.public_key())
    >>> message.data
    {'name': 'Toto', 'age': 42}
"""

__version__ = "0.2.0"

from sigenv.crypto import (
    KeyId,
    KeyMetadata,
    PublicKey,
    Signature,
    SignatureBuilder,
    SigningKey,
)
from sigenv.errors import (
    EncodingFailedError,
    KeyDecodeError,
    KeyExpirationError,
    KeyMismatchError,
    PastExpirationError,
    SigenvError,
    SignatureBuilderError,
    SignatureDecodeError,
    SignatureError,
    SignatureVerificationError,
    TimestampError,
)
from sigenv.models import KeyUsage, Message, Metadata

__all__ = [
    "__version__",
    "EncodingFailedError",
    "KeyDecodeError",
    "KeyExpirationError",
    "KeyId",
    "KeyMetadata",
    "KeyMismatchError",
    "KeyUsage",
    "Message",
    "Metadata",
    "PastExpirationError",
    "PublicKey",
    "SigenvError",
    "Signature",
    "SignatureBuilder",
    "SignatureBuilderError",
    "SignatureDecodeError",
    "SignatureError",
    "SignatureVerificationError",
    "SigningKey",
    "TimestampError",
]
