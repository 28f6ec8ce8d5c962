"""Choosing how to link OpenSSL.

The link kind is one global decision: every library in the plan is linked the
same way. An explicit ``OPENSSL_STATIC`` always wins; otherwise the library
directory is inspected and, when both kinds of artifacts are present, the
``prefer`` policy decides (dynamic by default, so the system can ship
security updates to the shared library without rebuilding its consumers).
"""

from __future__ import (
    annotations,
)

import enum
import os
from collections.abc import (
    Sequence,
)
from dataclasses import (
    dataclass,
)

from osslprobe.cfgs import (
    MajorLine,
)
from osslprobe.env import (
    Environment,
)
from osslprobe.errors import (
    ArtifactError,
)
from osslprobe.tables import (
    DYNAMIC_PATTERNS,
    STATIC_PATTERNS,
    WINDOWS_STATIC_SYSTEM_LIBS,
)


class LinkKind(enum.Enum):
    STATIC = "static"
    DYLIB = "dylib"


@dataclass(frozen=True)
class LinkPlan:
    """Libraries to link and how.

    :param kind: Link kind applied to every entry of ``libs``.
    :param libs: Library names, in link order.
    :param system_libs: Extra system libraries, always linked dynamically.
    """

    kind: LinkKind
    libs: tuple[str, ...]
    system_libs: tuple[str, ...] = ()


def default_libs(target: str, major_line: MajorLine, env: Environment) -> list[str]:
    """Library names to link, honouring ``OPENSSL_LIBS``.

    ``OPENSSL_LIBS`` is a colon separated list; an empty value links nothing.
    """
    libs_env = env.get("OPENSSL_LIBS")
    if libs_env is not None:
        return libs_env.split(":") if libs_env else []
    if major_line is MajorLine.OPENSSL_111 and "windows-msvc" in target:
        return ["libssl", "libcrypto"]
    return ["ssl", "crypto"]


def _has_all(files: set[str], libs: Sequence[str], patterns: Sequence[str]) -> bool:
    return all(any(p.format(lib) in files for p in patterns) for lib in libs)


def determine_mode(
    lib_dir: str,
    libs: Sequence[str],
    env: Environment,
    prefer: LinkKind = LinkKind.DYLIB,
) -> LinkKind:
    """Decide whether ``libs`` are linked statically or dynamically.

    :param lib_dir: Directory holding the OpenSSL artifacts.
    :param libs: Library names without prefix or extension.
    :param env: Build environment (``OPENSSL_STATIC``).
    :param prefer: Kind chosen when both kinds are available.
    :raises ArtifactError: If neither kind is fully available.
    """
    kind = env.get("OPENSSL_STATIC")
    if kind == "0":
        return LinkKind.DYLIB
    if kind:
        return LinkKind.STATIC

    try:
        files = set(os.listdir(lib_dir))
    except OSError as e:
        raise ArtifactError(f"Cannot list OpenSSL libdir at `{lib_dir}`: {e}") from e
    can_static = _has_all(files, libs, STATIC_PATTERNS)
    can_dylib = _has_all(files, libs, DYNAMIC_PATTERNS)
    env.trace(f"{lib_dir}: static={can_static} dylib={can_dylib} for {', '.join(libs)}")

    if can_static and not can_dylib:
        return LinkKind.STATIC
    if can_dylib and not can_static:
        return LinkKind.DYLIB
    if not can_static and not can_dylib:
        raise ArtifactError(
            f"OpenSSL libdir at `{lib_dir}` does not contain the required files "
            f"to either statically or dynamically link OpenSSL "
            f"(looked for: {', '.join(libs) or '(no libraries)'})"
        )
    return prefer


def plan_link(
    lib_dir: str,
    target: str,
    major_line: MajorLine,
    env: Environment,
    prefer: LinkKind = LinkKind.DYLIB,
) -> LinkPlan:
    """Build the complete :class:`LinkPlan` for one build."""
    libs = default_libs(target, major_line, env)
    kind = determine_mode(lib_dir, libs, env, prefer)
    system_libs: tuple[str, ...] = ()
    if kind is LinkKind.STATIC and "windows" in target:
        system_libs = WINDOWS_STATIC_SYSTEM_LIBS
    return LinkPlan(kind=kind, libs=tuple(libs), system_libs=system_libs)
