"""
Content locator validation.

Locators are IPFS-style content identifiers (CIDs). Accepted forms:
- CIDv0: 46 base58btc characters beginning with "Qm" (sha2-256 multihash)
- CIDv1: multibase-prefixed string whose payload starts with version 1
  ("b"/"B" base32, "z" base58btc, "f" base16, "k" base36)
"""

import base64
import binascii
import re

from stream_registry.core.exceptions import InvalidLocatorEncoding

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

CIDV0_LENGTH = 46
SHA2_256_MULTIHASH_PREFIX = b"\x12\x20"
MIN_CIDV1_BYTES = 4

_BASE36_RE = re.compile(r"[0-9a-z]+")
_BASE16_RE = re.compile(r"(?:[0-9a-f]{2})+")


def b58decode(text: str) -> bytes:
    """Decode a base58btc string."""
    num = 0
    for ch in text:
        index = BASE58_ALPHABET.find(ch)
        if index < 0:
            raise ValueError(f"invalid base58 character {ch!r}")
        num = num * 58 + index
    leading_zeros = len(text) - len(text.lstrip("1"))
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_zeros + body


def _b32decode(text: str) -> bytes:
    padded = text.upper() + "=" * (-len(text) % 8)
    return base64.b32decode(padded)


def _b32lower(text: str) -> bytes:
    if text != text.lower():
        raise ValueError("base32 payload must be lowercase")
    return _b32decode(text)


def _b32upper(text: str) -> bytes:
    if text != text.upper():
        raise ValueError("base32 payload must be uppercase")
    return _b32decode(text)


def _b36decode(text: str) -> bytes:
    if not _BASE36_RE.fullmatch(text):
        raise ValueError("base36 payload must be lowercase alphanumeric")
    num = int(text, 36)
    return num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""


def _b16decode(text: str) -> bytes:
    if not _BASE16_RE.fullmatch(text):
        raise ValueError("base16 payload must be lowercase hex pairs")
    return bytes.fromhex(text)


_MULTIBASE_DECODERS = {
    "b": _b32lower,
    "B": _b32upper,
    "z": b58decode,
    "f": _b16decode,
    "k": _b36decode,
}


def decode_cid(locator: str) -> tuple[int, bytes]:
    """
    Decode a CID string into (version, raw bytes).

    Raises:
        ValueError: If the string is not a well-formed CID
    """
    if len(locator) == CIDV0_LENGTH and locator.startswith("Qm"):
        raw = b58decode(locator)
        if len(raw) != 34 or not raw.startswith(SHA2_256_MULTIHASH_PREFIX):
            raise ValueError("CIDv0 must be a sha2-256 multihash")
        return 0, raw

    prefix, payload = locator[:1], locator[1:]
    decoder = _MULTIBASE_DECODERS.get(prefix)
    if decoder is None or not payload:
        raise ValueError(f"unsupported multibase prefix {prefix!r}")
    try:
        raw = decoder(payload)
    except binascii.Error as e:
        raise ValueError(str(e)) from e
    if len(raw) < MIN_CIDV1_BYTES or raw[0] != 1:
        raise ValueError("CIDv1 payload must start with version byte 0x01")
    return 1, raw


class CidLocatorValidator:
    """LocatorValidator accepting CIDv0 and CIDv1 strings."""

    DEFAULT_MAX_LENGTH = 128

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH):
        self.max_length = max_length

    def validate_locator(self, locator: str) -> None:
        """
        Check a locator's encoding.

        Raises:
            InvalidLocatorEncoding: If the locator is not a valid CID
        """
        if not isinstance(locator, str) or not locator:
            raise InvalidLocatorEncoding("Locator must be a non-empty string", locator=locator)
        if len(locator) > self.max_length:
            raise InvalidLocatorEncoding(
                f"Locator exceeds {self.max_length} characters", locator=locator
            )
        try:
            decode_cid(locator)
        except ValueError as e:
            raise InvalidLocatorEncoding(f"Invalid locator encoding: {e}", locator=locator) from e
