"""sigenv cryptographic layer.

- keys: SigningKey / PublicKey with metadata, key loading helpers
- builder: SignatureBuilder, staged construction of a Signature
- signature: Signature and its verification
- signing: canonical signing bytes (JCS, RFC 8785)
- primitive: Ed25519 with signify-style framing
"""

from sigenv.crypto import primitive
from sigenv.crypto.builder import SignatureBuilder
from sigenv.crypto.keys import KeyMetadata, PublicKey, SigningKey
from sigenv.crypto.primitive import KeyId
from sigenv.crypto.signature import Signature
from sigenv.crypto.signing import canonicalize

__all__ = [
    "primitive",
    "KeyId",
    "KeyMetadata",
    "PublicKey",
    "Signature",
    "SignatureBuilder",
    "SigningKey",
    "canonicalize",
]
