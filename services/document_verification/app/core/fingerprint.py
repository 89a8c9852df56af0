"""Canonical document fingerprints.

A fingerprint is the Keccak-256 digest of the UTF-8 bytes of the hash string
supplied by the registrant. The empty string is reserved: it maps to the
all-zero fingerprint, which is never accepted for registration.
"""

from Crypto.Hash import keccak

FINGERPRINT_SIZE = 32
ZERO_FINGERPRINT = bytes(FINGERPRINT_SIZE)


def canonicalize(document_hash: str) -> bytes:
    """Derive the fixed-width fingerprint for a document hash string.

    No normalization is applied, so ``"0xABC"`` and ``"0xabc"`` are
    distinct documents.

    Args:
        document_hash: Externally supplied hash string (e.g. "0xabcdef...")

    Returns:
        32-byte fingerprint, all zeros for the empty string
    """
    if not document_hash:
        return ZERO_FINGERPRINT
    digest = keccak.new(digest_bits=256)
    digest.update(document_hash.encode("utf-8"))
    return digest.digest()


def is_zero(fingerprint: bytes) -> bool:
    """Check whether a fingerprint is the reserved all-zero value."""
    return fingerprint == ZERO_FINGERPRINT


def to_hex(fingerprint: bytes) -> str:
    """Render a fingerprint as 0x-prefixed lowercase hex."""
    return "0x" + fingerprint.hex()


def from_hex(value: str) -> bytes:
    """Parse a 0x-prefixed (or bare) hex fingerprint.

    Raises:
        ValueError: If the value is not valid hex of the fingerprint width
    """
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    raw = bytes.fromhex(text)
    if len(raw) != FINGERPRINT_SIZE:
        raise ValueError(
            f"fingerprint must be {FINGERPRINT_SIZE} bytes, got {len(raw)}"
        )
    return raw
