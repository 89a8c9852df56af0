"""Identities and helpers shared by Document Verification tests."""

ADMIN = "0x1111111111111111111111111111111111111111"
VERIFIER = "0x2222222222222222222222222222222222222222"
OWNER = "0x3333333333333333333333333333333333333333"
OUTSIDER = "0x4444444444444444444444444444444444444444"

DOC_HASH = "0xabc123"
OTHER_HASH = "0xdef456"

FIXED_TIME = 1_700_000_000


def fixed_clock() -> int:
    return FIXED_TIME


def as_caller(identity: str) -> dict[str, str]:
    """Request headers authenticating ``identity``."""
    return {"X-User-ID": identity}
