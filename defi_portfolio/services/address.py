"""Helpers for normalizing chain identifiers and validating wallet addresses."""

from __future__ import annotations

import re

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_HEX_QUANTITY_RE = re.compile(r"^0x[a-fA-F0-9]*$")

_CHAIN_ALIASES = {
    "eth": "ethereum",
    "ethereum": "ethereum",
    "mainnet": "ethereum",
    "eth-mainnet": "ethereum",
    "matic": "polygon",
    "polygon": "polygon",
    "op": "optimism",
    "optimism": "optimism",
    "arb": "arbitrum",
    "arbitrum": "arbitrum",
    "arbitrum-one": "arbitrum",
    "sepolia": "sepolia",
    "eth-sepolia": "sepolia",
}


def normalize_chain(chain: str | None) -> str | None:
    """Collapse user-provided chain identifiers into canonical slugs.

    Returns ``None`` for a missing chain so callers can apply their own default.
    """

    if not chain or not chain.strip():
        return None
    cleaned = chain.lower().strip()
    return _CHAIN_ALIASES.get(cleaned, cleaned)


def is_valid_evm_address(address: str | None) -> bool:
    if not address:
        return False
    return bool(_EVM_ADDRESS_RE.fullmatch(address))


def parse_hex_quantity(value: str | None) -> int:
    """Parse an indexer hex balance; ``"0x"`` and empty values are zero."""

    if not value or not _HEX_QUANTITY_RE.fullmatch(value):
        raise ValueError(f"Malformed hex quantity: {value!r}")
    digits = value[2:]
    if not digits:
        return 0
    return int(digits, 16)


def is_zero_balance(value: str | None) -> bool:
    """True for the indexer's zero sentinels (``0x0``, ``0x``) and any all-zero hex."""

    try:
        return parse_hex_quantity(value) == 0
    except ValueError:
        return True


__all__ = [
    "normalize_chain",
    "is_valid_evm_address",
    "parse_hex_quantity",
    "is_zero_balance",
]
