"""Supported version range and the conditional-compilation tiers it yields.

A tier is enabled when the probed version is greater than or equal to its
threshold. Thresholds are evaluated independently, so a newer release always
enables a superset of an older release's tiers.

Example
-------
::

    from osslprobe import cfgs

    cfgs.classify(0x1010103F)  # MajorLine.OPENSSL_111
    cfgs.get(0x1010103F)       # ["ossl111c", "ossl111b", "ossl111"]
"""

from __future__ import (
    annotations,
)

import enum
import os
from collections.abc import (
    Mapping,
)

from osslprobe.errors import (
    MalformedVersionError,
    UnsupportedVersionError,
)
from osslprobe.version import (
    format_version,
)

MIN_SUPPORTED = 0x1_01_01_00_0
OPENSSL_3 = 0x3_00_00_00_0
MAX_EXCLUSIVE = 0x4_00_00_00_0

# Descending by threshold.
TIERS: tuple[tuple[int, str], ...] = (
    (0x3_02_00_00_0, "ossl320"),
    (0x3_01_00_00_0, "ossl310"),
    (OPENSSL_3, "ossl300"),
    (0x1_01_01_03_0, "ossl111c"),
    (0x1_01_01_02_0, "ossl111b"),
    (MIN_SUPPORTED, "ossl111"),
)


class MajorLine(enum.Enum):
    """Supported OpenSSL major lines, valued by their downstream tag."""

    OPENSSL_111 = "111"
    OPENSSL_300 = "300"

    @property
    def tag(self) -> str:
        return self.value


VERSION_ERROR = """
This package is only compatible with OpenSSL 1.1.1 or OpenSSL 3.x,
but OpenSSL {found} (version number 0x{number:x}) was found. The build is
now aborting due to this version mismatch.
"""


def classify(version: int) -> MajorLine:
    """Place ``version`` on a supported major line.

    :param version: Encoded version (see :mod:`osslprobe.version`).
    :raises UnsupportedVersionError: If ``version`` is older than 1.1.1 or
        not a 1.1.1/3.x release.
    """
    if version >= MAX_EXCLUSIVE or version < MIN_SUPPORTED:
        raise UnsupportedVersionError(VERSION_ERROR.format(found=format_version(version), number=version))
    if version >= OPENSSL_3:
        return MajorLine.OPENSSL_300
    return MajorLine.OPENSSL_111


def get(version: int) -> list[str]:
    """Return every tier enabled for ``version``, newest first."""
    return [name for threshold, name in TIERS if version >= threshold]


def cfgs_from_metadata(conf: str | None, version_number: str | None) -> list[str]:
    """Re-derive facts in a dependent build from emitted metadata.

    A package building on top of the bindings only sees the ``conf`` and
    ``version_number`` directives of the configuring build. This turns them
    back into the ``osslconf`` facts and the coarse ``ossl111``/``ossl300``
    tiers.

    :param conf: Comma-joined configuration flags, or None.
    :param version_number: Lowercase hex version number, or None.
    :raises MalformedVersionError: If ``version_number`` is not hex.
    """
    result: list[str] = []
    if conf:
        for var in conf.split(","):
            result.append(f'osslconf="{var}"')

    if version_number:
        try:
            version = int(version_number, 16)
        except ValueError as e:
            raise MalformedVersionError(f"Malformed version_number metadata {version_number!r}") from e
        if version >= MIN_SUPPORTED:
            result.append("ossl111")
        if version >= OPENSSL_3:
            result.append("ossl300")
    return result


def cfgs_from_env(environ: Mapping[str, str] | None = None) -> list[str]:
    """:func:`cfgs_from_metadata` reading ``DEP_OPENSSL_CONF`` and
    ``DEP_OPENSSL_VERSION_NUMBER``."""
    if environ is None:
        environ = os.environ
    return cfgs_from_metadata(environ.get("DEP_OPENSSL_CONF"), environ.get("DEP_OPENSSL_VERSION_NUMBER"))
