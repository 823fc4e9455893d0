"""Address normalization helpers."""

from typing import Any

from walletcore.domain.enums import PeerSentinel

_SENTINELS = {s.value for s in PeerSentinel}


def normalize_address(address: Any) -> str:
    """Trim and lower-case an address. ``None`` becomes an empty string."""
    return str(address if address is not None else "").strip().lower()


def normalize_peer(address: Any) -> str:
    """Like normalize_address, but keeps the Other/Unknown sentinels verbatim."""
    text = str(address if address is not None else "").strip()
    if text in _SENTINELS:
        return text
    return text.lower()


def utxo_descriptor(address: str) -> str:
    """Output descriptor understood by ``scantxoutset``."""
    return f"addr({address})"


def vout_address(vout: dict | None) -> str:
    """Extract the destination address of a transaction output, or ``""``."""
    if not vout:
        return ""
    script = vout.get("scriptPubKey") or {}
    address = script.get("address")
    if address:
        return address
    addresses = script.get("addresses") or []
    return addresses[0] if addresses else ""
