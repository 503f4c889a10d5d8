"""
Content addressing and hashing.

Every datum has a permanent IRI derived from its bytes through the
Braille bijection (byte → U+2800 + byte). It is not a hash: the mapping
is lossless and invertible.

Structured payloads are hashed through ``canonical_json``, which yields
identical bytes for logically identical objects regardless of key order.
All ids in a deployment use the single HASH_ALGORITHM.
"""

import base64
import hashlib
import json
import re
from typing import Any

from .errors import HashUnavailable, ValidationError
from .ring import ByteTuple, Ring

BASE_IRI = "https://uor.foundation/u/"
HASH_ALGORITHM = "sha256"

BRAILLE_BASE = 0x2800

_SEGMENT = re.compile(r"U([0-9A-Fa-f]{4})")

# CIDv1, dag-json codec (0x0129 as varint), sha2-256 multihash, 32-byte digest
_CID_PREFIX = bytes([0x01, 0xA9, 0x02, 0x12, 0x20])


# ═══════════════════════════════════════════════════════════════════════════════
# BRAILLE BIJECTION
# ═══════════════════════════════════════════════════════════════════════════════

def codepoint(byte: int) -> int:
    return BRAILLE_BASE + (byte & 0xFF)


def glyph(b: ByteTuple) -> str:
    return ''.join(chr(codepoint(byte)) for byte in b)


def uplus(b: ByteTuple) -> str:
    return ' '.join(f"U+{codepoint(byte):04X}" for byte in b)


def bytes_to_iri(b: ByteTuple) -> str:
    codes = ''.join(f"U{codepoint(byte):04X}" for byte in b)
    return f"{BASE_IRI}{codes}"


def iri_to_bytes(iri: str) -> ByteTuple:
    """Parse a full IRI or its bare path segment back into bytes."""
    path = iri[len(BASE_IRI):] if iri.startswith(BASE_IRI) else iri
    result = []
    for match in _SEGMENT.finditer(path):
        cp = int(match.group(1), 16)
        if not BRAILLE_BASE <= cp <= BRAILLE_BASE + 0xFF:
            raise ValidationError(f"Codepoint U+{cp:04X} is outside U+2800..U+28FF")
        result.append(cp - BRAILLE_BASE)
    if not result:
        raise ValidationError(f"No U{{HEX4}} segments in IRI: {iri}")
    return tuple(result)


def content_address(ring: Ring, value: int) -> str:
    """The IRI of ``value`` in ``ring``. Pure and deterministic over (quantum, value)."""
    return bytes_to_iri(ring.to_bytes(value))


# ═══════════════════════════════════════════════════════════════════════════════
# HASHING
# ═══════════════════════════════════════════════════════════════════════════════

def canonical_json(obj: Any) -> bytes:
    """Sorted keys, no insignificant whitespace, UTF-8."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def digest(data: bytes, algorithm: str = HASH_ALGORITHM) -> bytes:
    try:
        h = hashlib.new(algorithm)
    except ValueError as e:
        raise HashUnavailable(f"Hash algorithm unavailable: {algorithm}") from e
    h.update(data)
    return h.digest()


def hash_hex(data: bytes, algorithm: str = HASH_ALGORITHM) -> str:
    return digest(data, algorithm).hex()


def compute_cid(data: bytes) -> str:
    """CIDv1 / dag-json / sha2-256 of ``data``, base32-lower with the multibase 'b' prefix."""
    binary = _CID_PREFIX + digest(data, "sha256")
    encoded = base64.b32encode(binary).decode("ascii").rstrip("=").lower()
    return "b" + encoded


def content_id(obj: Any) -> str:
    return compute_cid(canonical_json(obj))

