from __future__ import annotations

import base64
import hashlib
import json
from typing import Any, List

SIGPRINT_LENGTH = 20
PAIR_HASH_LENGTH = 16
_BASE32_ALPHABET = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")


def canonical_json(payload: Any) -> str:
    """Deterministic JSON: sorted keys, no whitespace, unicode kept as-is."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def content_sha256(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def payload_hash(payload: Any) -> str:
    return content_sha256(canonical_json(payload))


def pair_hash(thesis: str, antithesis: str) -> str:
    """Identity of a (thesis, antithesis) pair: sha256 of the trimmed, lowercased pair, truncated."""
    combined = f"{(thesis or '').lower().strip()}|{(antithesis or '').lower().strip()}"
    return content_sha256(combined)[:PAIR_HASH_LENGTH]


def sigprint20(tt: str, cc: str, ss: str, pp: List[str], rr: str) -> str:
    """
    20 character fingerprint of a canonicalized record.

    Fields are trimmed and ``pp`` is sorted so that reordering it does not
    change the print. The digest is rendered in the base32 alphabet and padded
    with '2' if it comes up short.
    """
    record = {
        "TT": tt.strip(),
        "CC": cc.strip(),
        "SS": ss.strip(),
        "PP": sorted(p.strip() for p in pp),
        "RR": rr.strip(),
    }
    digest = hashlib.sha256(canonical_json(record).encode("utf-8")).digest()
    encoded = base64.b64encode(digest).decode("ascii").upper()
    b32 = "".join(c for c in encoded if c in _BASE32_ALPHABET)[:SIGPRINT_LENGTH]
    return b32.ljust(SIGPRINT_LENGTH, "2")
