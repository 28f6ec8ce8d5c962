"""Encoding of OpenSSL versions into a single ordered integer.

OpenSSL changed how its headers report their version across major lines, so
two textual formats have to be understood:

Legacy
    The ``OPENSSL_VERSION_NUMBER`` hex literal, e.g. ``0x1010107fL``. Its bit
    layout is ``MNNFFPPS``: major nibble, minor byte, fix byte, patch byte
    and status nibble.

Modern
    ``<major>_<minor>_<patch>`` built from the ``OPENSSL_VERSION_MAJOR``,
    ``OPENSSL_VERSION_MINOR`` and ``OPENSSL_VERSION_PATCH`` macros of 3.x
    headers, packed as ``major << 28 | minor << 20 | patch << 4``.

Both decoders produce plain ``int`` values on the same scale, so every
comparison in the package is a simple ``>=``. For 3.x releases the two
formats agree exactly: ``decode_legacy("0x30000020L") == decode_modern("3_0_2")``.

Example
-------
::

    from osslprobe.version import decode_legacy, decode_modern, format_version

    decode_legacy("0x1010103fL") < decode_modern("3_0_0")  # True
    format_version(0x1010103F)                              # "1.1.1c"
"""

from __future__ import (
    annotations,
)

import re
from dataclasses import (
    dataclass,
)
from typing import (
    Literal,
)

from osslprobe.errors import (
    MalformedVersionError,
)

_LEGACY_RE = re.compile(r"0x([0-9a-fA-F]+)[^0-9a-fA-F]*")
_MODERN_COMPONENT_RE = re.compile(r"[0-9]+")


def decode_legacy(text: str) -> int:
    """Decode a legacy ``OPENSSL_VERSION_NUMBER`` literal.

    The ``0x`` prefix is required; any trailing type suffix (``L``, ``UL``,
    ...) is stripped before parsing the remainder as base 16.

    :param text: Literal such as ``"0x100020cfL"``.
    :returns: The encoded version, e.g. ``0x100020cf``.
    :raises MalformedVersionError: If ``text`` is not a hex literal.
    """
    match = _LEGACY_RE.fullmatch(text.strip())
    if match is None:
        raise MalformedVersionError(f"Malformed OpenSSL version number {text!r}: expected a hex literal like 0x1010107fL")
    return int(match.group(1), 16)


def decode_modern(text: str) -> int:
    """Decode a ``<major>_<minor>_<patch>`` version triple.

    :param text: Triple such as ``"3_0_0"``.
    :returns: ``major << 28 | minor << 20 | patch << 4``.
    :raises MalformedVersionError: Unless ``text`` has exactly three in-range
        decimal components.
    """
    parts = text.strip().split("_")
    if len(parts) != 3 or not all(_MODERN_COMPONENT_RE.fullmatch(p) for p in parts):
        raise MalformedVersionError(
            f"Malformed OpenSSL version {text!r}: expected <major>_<minor>_<patch> such as 3_0_0"
        )
    major, minor, patch = (int(p) for p in parts)
    if major > 0xF or minor > 0xFF or patch > 0xFFFF:
        raise MalformedVersionError(
            f"OpenSSL version {text!r} out of range: major < 16, minor < 256 and patch < 65536 are required"
        )
    return (major << 28) | (minor << 20) | (patch << 4)


VersionFormat = Literal["legacy", "modern"]


@dataclass(frozen=True)
class VersionText:
    """Raw version text as reported by the headers, tagged with its format.

    :param kind: ``"legacy"`` or ``"modern"``.
    :param text: The text following the probe's version sentinel.
    """

    kind: VersionFormat
    text: str

    def decode(self) -> int:
        if self.kind == "legacy":
            return decode_legacy(self.text)
        return decode_modern(self.text)


def format_version(version: int) -> str:
    """Render an encoded version for humans (``"1.1.1c"``, ``"3.0.2"``)."""
    major = version >> 28
    minor = (version >> 20) & 0xFF
    if major >= 3:
        return f"{major}.{minor}.{(version >> 4) & 0xFFFF}"
    fix = (version >> 12) & 0xFF
    patch = (version >> 4) & 0xFF
    letter = ""
    if patch:
        # 1.0.2z is followed by 1.0.2za
        letter = "z" * ((patch - 1) // 26) + chr(ord("a") + (patch - 1) % 26)
    return f"{major}.{minor}.{fix}{letter}"
