"""
crypto.py - ed25519 signature primitives.

verify_signature() is the default SignatureVerifier used by TxHandler.
An address is the raw 32-byte ed25519 public key of the output's owner.
"""

from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PrivateFormat, NoEncryption, PublicFormat


def generate_keypair() -> Tuple[bytes, bytes]:
    """
    Return (private_bytes, public_bytes) for a fresh ed25519 key.

    The public bytes double as the owner's address.
    """
    priv = Ed25519PrivateKey.generate()
    priv_bytes = priv.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    pub_bytes = priv.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return priv_bytes, pub_bytes


def sign_message(message: bytes, private_bytes: bytes) -> bytes:
    priv = Ed25519PrivateKey.from_private_bytes(private_bytes)
    return priv.sign(message)


def verify_signature(address: bytes, message: bytes, signature: Optional[bytes]) -> bool:
    """
    Check `signature` over `message` under the public key `address`.

    Returns False for a missing signature, a malformed key or a malformed
    signature; never raises.
    """
    if not signature:
        return False
    try:
        pub = Ed25519PublicKey.from_public_bytes(address)
        pub.verify(signature, message)
        return True
    except (InvalidSignature, ValueError, TypeError):
        return False
