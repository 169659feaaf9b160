"""Client address helpers."""
from __future__ import annotations


def first_forwarded_address(forwarded_for: str | None) -> str | None:
    """Return the originating address from an ``X-Forwarded-For`` header."""

    if not forwarded_for:
        return None
    for part in forwarded_for.split(","):
        address = part.strip()
        if address:
            return address
    return None


def client_identifier(
    peer_host: str | None, forwarded_for: str | None = None, *, trust_proxy: bool = False
) -> str:
    """Derive the quota key for a request from its network origin."""

    if trust_proxy:
        forwarded = first_forwarded_address(forwarded_for)
        if forwarded:
            return forwarded
    return peer_host or "unknown"
