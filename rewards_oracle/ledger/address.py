"""Ledger account address grammar.

Addresses are base58 text encoding a 32-byte public key. The text must be
exactly the encoding: whitespace or any other character outside the base58
alphabet makes the address invalid.
"""

from __future__ import annotations

import base58

ADDRESS_BYTES = 32
_MIN_ADDRESS_CHARS = 32
_MAX_ADDRESS_CHARS = 44
_ALPHABET = frozenset(base58.BITCOIN_ALPHABET.decode("ascii"))


def is_valid_address(value: object) -> bool:
    """Return True when ``value`` is a well-formed ledger address."""
    if not isinstance(value, str):
        return False
    if not _MIN_ADDRESS_CHARS <= len(value) <= _MAX_ADDRESS_CHARS:
        return False
    # b58decode strips surrounding whitespace, so check the text itself first
    if not _ALPHABET.issuperset(value):
        return False
    try:
        decoded = base58.b58decode(value)
    except ValueError:
        return False
    return len(decoded) == ADDRESS_BYTES
