"""Environment lookups for cross-compiling builds.

Every build input is read through :class:`Environment`. A name is looked up
first with the uppercased, underscored target triple as prefix and then bare,
so a cross build can set ``AARCH64_UNKNOWN_LINUX_GNU_OPENSSL_DIR`` without
clobbering the host's ``OPENSSL_DIR``.

Example
-------
::

    from osslprobe.env import Environment

    env = Environment("x86_64-unknown-linux-gnu", {"OPENSSL_DIR": "/opt/ssl"})
    env.get("OPENSSL_DIR")  # "/opt/ssl"
    env.consulted           # ["X86_64_UNKNOWN_LINUX_GNU_OPENSSL_DIR", "OPENSSL_DIR"]
"""

from __future__ import (
    annotations,
)

import os
import platform
import sys
import sysconfig
from collections.abc import (
    Mapping,
)


def _debug_print(msg: str) -> None:
    """Print debug message to stderr."""
    print(f"[osslprobe] {msg}", file=sys.stderr)


def target_prefix(target: str) -> str:
    """Return the variable prefix for ``target``.

    :param target: Target triple, e.g. ``"x86_64-unknown-linux-gnu"``.
    :returns: ``"X86_64_UNKNOWN_LINUX_GNU"``.
    """
    return target.upper().replace("-", "_")


_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "i686",
    "i586": "i686",
    "x86": "i686",
    "armv7l": "armv7",
}


def host_triple() -> str:
    """Best-effort target triple for the running interpreter."""
    machine = platform.machine().lower() or "unknown"
    arch = _ARCH_ALIASES.get(machine, machine)

    if sys.platform == "darwin":
        return f"{arch}-apple-darwin"
    if sys.platform == "win32":
        if sysconfig.get_platform().startswith("mingw"):
            return f"{arch}-pc-windows-gnu"
        return f"{arch}-pc-windows-msvc"
    if sys.platform.startswith("linux"):
        libc, _ = platform.libc_ver()
        abi = "gnu" if libc == "glibc" else "musl"
        if arch == "armv7":
            abi += "eabihf"
        return f"{arch}-unknown-linux-{abi}"
    for system in ("freebsd", "dragonfly", "netbsd", "openbsd"):
        if sys.platform.startswith(system):
            return f"{arch}-unknown-{system}"
    return f"{arch}-unknown-{sys.platform}"


class Environment:
    """Target-aware view over environment variables.

    :param target: Target triple the build is producing artifacts for.
    :param environ: Mapping to read from; defaults to :data:`os.environ`.
    :param debug: Trace every lookup to stderr.

    All names that were looked up are recorded in :attr:`consulted`, in lookup
    order and without duplicates, so the build can be told which variables it
    must be re-run for.
    """

    def __init__(
        self,
        target: str,
        environ: Mapping[str, str] | None = None,
        debug: bool = False,
    ) -> None:
        self.target = target
        self.debug = debug
        self.consulted: list[str] = []
        self._environ = os.environ if environ is None else environ

    def trace(self, msg: str) -> None:
        if self.debug:
            _debug_print(msg)

    def child_environ(self) -> dict[str, str]:
        """Environment for subprocesses: the process environment overlaid with
        the mapping this view reads from."""
        child = dict(os.environ)
        child.update(self._environ)
        return child

    def raw(self, name: str) -> str | None:
        """Look up ``name`` exactly as given, without a target prefix."""
        if name not in self.consulted:
            self.consulted.append(name)
        value = self._environ.get(name)
        if value is None:
            self.trace(f"{name} unset")
        else:
            self.trace(f"{name} = {value}")
        return value

    def get(self, name: str) -> str | None:
        """Look up ``<TARGET>_<name>``, falling back to ``name``.

        An empty value under the prefixed name still wins; only an unset
        prefixed variable falls through to the bare one.
        """
        value = self.raw(f"{target_prefix(self.target)}_{name}")
        if value is None:
            value = self.raw(name)
        return value
