"""
adslot.state.codec — storage keys and value encodings.

Layout
------
    "ad:" + u64be(id)   -> CBOR map (Ad.to_record())
    "seq:ad"            -> u64be next id to allocate
    "cfg:fee"           -> platform fee-recipient address (raw bytes)
    "esc:reserved"      -> u256be sum of deposits currently held in escrow

Integers use fixed-width big-endian encodings so that keys sort by id and
values round-trip without ambiguity. Records use canonical CBOR (cbor2) so
the same Ad always encodes to the same bytes.

Snapshots bundle the whole visible state (storage + balances) into one
canonical CBOR document:

    {"v": 1, "storage": {key: value, ...}, "balances": {addr: int, ...}}
"""

from __future__ import annotations

from typing import Any, Dict, Final, Mapping, Tuple

import cbor2

from ..types import Ad

SNAPSHOT_VERSION: Final[int] = 1

_U64_MAX: Final[int] = (1 << 64) - 1
_U256_MAX: Final[int] = (1 << 256) - 1

# Storage prefixes
P_AD: Final[bytes] = b"ad:"
K_NEXT_ID: Final[bytes] = b"seq:ad"
K_FEE_ADDRESS: Final[bytes] = b"cfg:fee"
K_RESERVED: Final[bytes] = b"esc:reserved"


class CodecError(ValueError):
    """Corrupt or out-of-range value at the storage boundary."""


# ---------- integers ----------


def u64_to_bytes(x: int) -> bytes:
    if not isinstance(x, int) or x < 0 or x > _U64_MAX:
        raise CodecError(f"u64 out of range: {x!r}")
    return x.to_bytes(8, "big")


def bytes_to_u64(b: bytes) -> int:
    if len(b) == 0:
        return 0
    if len(b) != 8:
        raise CodecError("corrupt u64")
    return int.from_bytes(b, "big")


def u256_to_bytes(x: int) -> bytes:
    if not isinstance(x, int) or x < 0 or x > _U256_MAX:
        raise CodecError(f"u256 out of range: {x!r}")
    return x.to_bytes(32, "big")


def bytes_to_u256(b: bytes) -> int:
    if len(b) == 0:
        return 0
    if len(b) != 32:
        raise CodecError("corrupt u256")
    return int.from_bytes(b, "big")


# ---------- keys ----------


def ad_key(ad_id: int) -> bytes:
    return P_AD + u64_to_bytes(ad_id)


# ---------- records ----------


def encode_ad(ad: Ad) -> bytes:
    return cbor2.dumps(ad.to_record(), canonical=True)


def decode_ad(raw: bytes) -> Ad:
    try:
        rec = cbor2.loads(raw)
    except cbor2.CBORDecodeError as e:
        raise CodecError(f"corrupt ad record: {e}") from e
    if not isinstance(rec, dict):
        raise CodecError("ad record must be a map")
    return Ad.from_record(rec)


# ---------- snapshots ----------


def encode_snapshot(storage: Mapping[bytes, bytes], balances: Mapping[bytes, int]) -> bytes:
    doc: Dict[str, Any] = {
        "v": SNAPSHOT_VERSION,
        "storage": {bytes(k): bytes(v) for k, v in storage.items()},
        "balances": {bytes(a): int(v) for a, v in balances.items() if v},
    }
    return cbor2.dumps(doc, canonical=True)


def decode_snapshot(raw: bytes) -> Tuple[Dict[bytes, bytes], Dict[bytes, int]]:
    try:
        doc = cbor2.loads(raw)
    except cbor2.CBORDecodeError as e:
        raise CodecError(f"corrupt snapshot: {e}") from e
    if not isinstance(doc, dict) or doc.get("v") != SNAPSHOT_VERSION:
        raise CodecError("unsupported snapshot version")
    storage = {bytes(k): bytes(v) for k, v in doc.get("storage", {}).items()}
    balances = {bytes(a): int(v) for a, v in doc.get("balances", {}).items()}
    return storage, balances


__all__ = [
    "SNAPSHOT_VERSION",
    "P_AD",
    "K_NEXT_ID",
    "K_FEE_ADDRESS",
    "K_RESERVED",
    "CodecError",
    "u64_to_bytes",
    "bytes_to_u64",
    "u256_to_bytes",
    "bytes_to_u256",
    "ad_key",
    "encode_ad",
    "decode_ad",
    "encode_snapshot",
    "decode_snapshot",
]
