"""Name parsing, hashing and classification.

A name is a dot-separated label sequence (e.g. ``sub.alice.eth``).  The
*namehash* is computed by hashing labels from the root towards the leaf;
the *labelhash* is the keccak256 of a single label.

Labels written as ``[<64 hex chars>]`` are encoded labelhashes: the label
itself is unknown and the bracketed value is used as its hash.
"""

from __future__ import annotations

import re
from enum import Enum

from ens.exceptions import InvalidName
from ens.utils import normalize_name
from eth_utils import keccak

from ensres.protocol.errors import InvalidNameError
from ensres.protocol.types import EMPTY_BYTES32

DEFAULT_MANAGED_TLD = "eth"

_ENCODED_LABEL_RE = re.compile(r"^\[([0-9a-f]{64})\]$")

# DNS wire format caps a single label at 255 bytes
_MAX_DNS_LABEL_LEN = 255


class NameType(str, Enum):
    """Structural classification of a name relative to the managed TLD."""

    ROOT = "root"
    TLD = "tld"
    ETH_2LD = "eth-2ld"
    ETH_SUBNAME = "eth-subname"
    OTHER_2LD = "other-2ld"
    OTHER_SUBNAME = "other-subname"


def normalise(name: str) -> str:
    """Return *name* in ENSIP-15 normal form, rejecting invalid labels.

    The empty string is the root name and is returned unchanged.  Encoded
    ``[<hex>]`` labels stand for a hash rather than text and are only
    lowercased.

    Raises:
        InvalidNameError: If any label is empty (``"alice..eth"``, ``".eth"``)
            or cannot be normalised (disallowed characters, mixed scripts).
    """
    stripped = name.strip()
    if not stripped:
        return ""
    labels = stripped.split(".")
    if any(not label for label in labels):
        raise InvalidNameError(f"Name contains an empty label: {name!r}")
    return ".".join(_normalise_label(label, name) for label in labels)


def _normalise_label(label: str, name: str) -> str:
    if encoded_labelhash(label.lower()) is not None:
        return label.lower()
    try:
        return normalize_name(label)
    except InvalidName as e:
        raise InvalidNameError(f"Cannot normalise {name!r}: {e}") from e


def split_labels(name: str) -> list[str]:
    """Return the labels of *name*, leaf first.  The root name has none."""
    normalised = normalise(name)
    if not normalised:
        return []
    return normalised.split(".")


def encoded_labelhash(label: str) -> bytes | None:
    """Return the hash carried by an ``[<hex>]`` label, or ``None``."""
    m = _ENCODED_LABEL_RE.match(label)
    if not m:
        return None
    return bytes.fromhex(m.group(1))


def labelhash(label: str) -> bytes:
    """Return the keccak256 hash of a single label."""
    if not label:
        raise InvalidNameError("Cannot hash an empty label")
    encoded = encoded_labelhash(label)
    if encoded is not None:
        return encoded
    return keccak(text=label)


def namehash(name: str) -> bytes:
    """Return the 32-byte namehash of *name* (root hashes to zero bytes)."""
    node = EMPTY_BYTES32
    for label in reversed(split_labels(name)):
        node = keccak(node + labelhash(label))
    return node


def dns_encode(name: str) -> bytes:
    """Encode *name* in DNS wire format (length-prefixed labels, zero terminated).

    Labels longer than 255 bytes are replaced by their encoded labelhash.
    """
    out = bytearray()
    for label in split_labels(name):
        raw = label.encode("utf-8")
        if len(raw) > _MAX_DNS_LABEL_LEN:
            raw = f"[{labelhash(label).hex()}]".encode("ascii")
        out.append(len(raw))
        out += raw
    out.append(0)
    return bytes(out)


def is_managed_tld_name(
    labels: list[str], tld: str = DEFAULT_MANAGED_TLD
) -> bool:
    """True iff *labels* form a second-level name directly under *tld*."""
    return len(labels) == 2 and labels[-1] == tld


def get_name_type(name: str, tld: str = DEFAULT_MANAGED_TLD) -> NameType:
    """Classify *name* by label count and whether it sits under *tld*."""
    labels = split_labels(name)
    if not labels:
        return NameType.ROOT
    if len(labels) == 1:
        return NameType.TLD
    managed = labels[-1] == tld
    if len(labels) == 2:
        return NameType.ETH_2LD if managed else NameType.OTHER_2LD
    return NameType.ETH_SUBNAME if managed else NameType.OTHER_SUBNAME
