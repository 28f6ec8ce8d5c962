"""Locating OpenSSL's library and include directories.

Strategies are tried in order until one succeeds:

1. vendored build (when requested and not disabled by ``OPENSSL_NO_VENDOR``),
2. ``OPENSSL_LIB_DIR`` + ``OPENSSL_INCLUDE_DIR``, or ``OPENSSL_DIR``,
3. pkg-config,
4. vcpkg (``*-windows-msvc`` targets only),
5. conventional install prefixes (native builds only).

A partial override (only one of ``OPENSSL_LIB_DIR``/``OPENSSL_INCLUDE_DIR``)
replaces that half of whatever the remaining strategies find.
"""

from __future__ import (
    annotations,
)

import os
import shutil
import subprocess
from dataclasses import (
    dataclass,
    replace,
)

from osslprobe.env import (
    Environment,
)
from osslprobe.errors import (
    NotFoundError,
)
from osslprobe.tables import (
    FALLBACK_PREFIXES,
    GENERIC_PREFIXES,
    PKG_CONFIG_SEARCH_VARS,
    VCPKG_ARCHES,
)
from osslprobe.vendor import (
    SourceTreeBuilder,
    VendoredBuilder,
)


@dataclass(frozen=True)
class LibraryLocation:
    """Resolved OpenSSL directories.

    :param lib_dir: Directory containing the linkable artifacts.
    :param include_dir: Directory containing ``openssl/*.h``.
    :param method: Name of the strategy that produced the location.
    """

    lib_dir: str
    include_dir: str
    method: str = ""


class PkgConfigQuery:
    """Query pkg-config for an installed package."""

    def query(self, package: str, env: Environment, host: str) -> LibraryLocation | None:
        """Return the package's ``libdir``/``includedir``, or None.

        pkg-config answers for the host; cross builds are skipped unless
        ``PKG_CONFIG_ALLOW_CROSS=1`` (implied for ``windows-gnu`` targets on a
        Windows host).
        """
        target = env.target
        allow_cross = env.raw("PKG_CONFIG_ALLOW_CROSS") == "1"
        if "windows-gnu" in target and "windows" in host:
            allow_cross = True
        if host != target and not allow_cross:
            env.trace(f"Skipping pkg-config: cross compiling from {host} to {target}")
            return None

        pkg_config = env.raw("PKG_CONFIG") or "pkg-config"
        if shutil.which(pkg_config) is None:
            env.trace(f"Skipping pkg-config: {pkg_config} not found")
            return None

        child_env = env.child_environ()
        for name in PKG_CONFIG_SEARCH_VARS:
            env.raw(name)
        if allow_cross:
            child_env["PKG_CONFIG_ALLOW_CROSS"] = "1"

        if not self._check_exists(pkg_config, package, child_env):
            return None
        lib_dir = self._get_variable(pkg_config, package, "libdir", child_env)
        include_dir = self._get_variable(pkg_config, package, "includedir", child_env)
        if not lib_dir or not include_dir:
            return None
        return LibraryLocation(lib_dir=lib_dir, include_dir=include_dir, method="pkg_config")

    def _check_exists(self, pkg_config: str, package: str, child_env: dict[str, str]) -> bool:
        """Check if package exists via pkg-config --exists."""
        try:
            subprocess.run(
                [pkg_config, "--exists", package],
                check=True,
                capture_output=True,
                env=child_env,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    def _get_variable(self, pkg_config: str, package: str, variable: str, child_env: dict[str, str]) -> str:
        try:
            result = subprocess.run(
                [pkg_config, f"--variable={variable}", package],
                capture_output=True,
                text=True,
                env=child_env,
            )
            return result.stdout.strip()
        except FileNotFoundError:
            return ""


class VcpkgQuery:
    """Look up a package in a vcpkg tree (``VCPKG_ROOT``)."""

    def query(self, package: str, env: Environment) -> LibraryLocation | None:
        if "windows-msvc" not in env.target:
            return None
        root = env.raw("VCPKG_ROOT")
        if not root:
            return None

        triplet = env.raw("VCPKGRS_TRIPLET") or self._triplet(env)
        installed = os.path.join(root, "installed", triplet)
        lib_dir = os.path.join(installed, "lib")
        include_dir = os.path.join(installed, "include")
        if not os.path.isdir(lib_dir) or not os.path.isdir(os.path.join(include_dir, package)):
            env.trace(f"vcpkg: {package} not installed for {triplet} under {root}")
            return None
        return LibraryLocation(lib_dir=lib_dir, include_dir=include_dir, method="vcpkg")

    def _triplet(self, env: Environment) -> str:
        arch = env.target.split("-", 1)[0]
        triplet = f"{VCPKG_ARCHES.get(arch, arch)}-windows"
        static = env.get("OPENSSL_STATIC")
        if static and static != "0":
            triplet += "-static-md"
        return triplet


def _lib_subdir(prefix: str, target: str) -> str | None:
    """Pick the prefix's library directory, preferring Debian multiarch."""
    arch = target.split("-", 1)[0]
    candidates = [f"lib/{arch}-linux-gnu", "lib64", "lib"] if "linux" in target else ["lib"]
    existing = [os.path.join(prefix, c) for c in candidates if os.path.isdir(os.path.join(prefix, c))]
    for lib_dir in existing:
        if any(name.startswith(("libcrypto", "crypto")) for name in os.listdir(lib_dir)):
            return lib_dir
    return existing[-1] if existing else None


def find_prefix_location(target: str, env: Environment) -> LibraryLocation | None:
    """First conventional prefix with both ``include/openssl`` and a lib dir."""
    prefixes: list[str] = []
    for key, candidates in FALLBACK_PREFIXES.items():
        if key in target:
            prefixes.extend(candidates)
    prefixes.extend(GENERIC_PREFIXES)

    for prefix in prefixes:
        include_dir = os.path.join(prefix, "include")
        if not os.path.isdir(os.path.join(include_dir, "openssl")):
            continue
        lib_dir = _lib_subdir(prefix, target)
        if lib_dir is None:
            continue
        env.trace(f"Found OpenSSL under {prefix}")
        return LibraryLocation(lib_dir=lib_dir, include_dir=include_dir, method="prefix")
    return None


def _not_found_message(host: str, target: str) -> str:
    msg = f"""
Could not find directory of OpenSSL installation, and this package cannot
proceed without this knowledge. If OpenSSL is installed and it could not be
found, you can set the `OPENSSL_DIR` environment variable for the build
process (or `OPENSSL_LIB_DIR` and `OPENSSL_INCLUDE_DIR`).

Make sure you also have the development packages of openssl installed.
For example, `libssl-dev` on Ubuntu or `openssl-devel` on Fedora.

Searched: OPENSSL_DIR, pkg-config, vcpkg (MSVC targets), and conventional
install prefixes (native builds only).

$HOST = {host}
$TARGET = {target}
"""
    if host != target and "musl" in target:
        msg += """
It looks like you're compiling for MUSL, which may mean you need a different
C toolchain than your host's. Point `OPENSSL_DIR` at an OpenSSL built with
the musl toolchain, or request a vendored build.
"""
    return msg


def _discover(
    target: str,
    env: Environment,
    host: str,
    pkg_config: PkgConfigQuery,
    vcpkg: VcpkgQuery,
) -> LibraryLocation:
    location = pkg_config.query("openssl", env, host)
    if location is None:
        location = vcpkg.query("openssl", env)
    if location is None and host == target:
        location = find_prefix_location(target, env)
    if location is None:
        raise NotFoundError(_not_found_message(host, target))
    return location


def _check_dir(kind: str, path: str) -> None:
    if not os.path.exists(path):
        raise NotFoundError(f"OpenSSL {kind} directory does not exist: {path}")
    if not os.path.isdir(path):
        raise NotFoundError(f"OpenSSL {kind} path is not a directory: {path}")


def _check_exists(location: LibraryLocation) -> LibraryLocation:
    _check_dir("library", location.lib_dir)
    _check_dir("include", location.include_dir)
    return location


def find_openssl(
    env: Environment,
    host: str,
    vendored: bool = False,
    builder: VendoredBuilder | None = None,
    pkg_config: PkgConfigQuery | None = None,
    vcpkg: VcpkgQuery | None = None,
) -> LibraryLocation:
    """Resolve OpenSSL's directories for ``env.target``.

    :param env: Build environment for the target.
    :param host: Triple of the build host.
    :param vendored: Build from source unless ``OPENSSL_NO_VENDOR`` is set to
        something other than ``"0"``.
    :param builder: Vendored builder; :class:`SourceTreeBuilder` if None.
    :raises NotFoundError: If nothing was found or a directory is missing.
    :raises VendorError: If the vendored build fails.
    """
    target = env.target

    if vendored:
        no_vendor = env.get("OPENSSL_NO_VENDOR")
        if no_vendor is None or no_vendor == "0":
            if builder is None:
                builder = SourceTreeBuilder(env)
            lib_dir, include_dir = builder.build(target)
            return _check_exists(LibraryLocation(lib_dir, include_dir, method="vendored"))

    lib_dir = env.get("OPENSSL_LIB_DIR")
    include_dir = env.get("OPENSSL_INCLUDE_DIR")
    if lib_dir is not None and include_dir is not None:
        return _check_exists(LibraryLocation(lib_dir, include_dir, method="override"))

    openssl_dir = env.get("OPENSSL_DIR")
    if openssl_dir is not None:
        location = LibraryLocation(
            os.path.join(openssl_dir, "lib"),
            os.path.join(openssl_dir, "include"),
            method="openssl_dir",
        )
    else:
        location = _discover(target, env, host, pkg_config or PkgConfigQuery(), vcpkg or VcpkgQuery())

    if lib_dir is not None:
        location = replace(location, lib_dir=lib_dir)
    if include_dir is not None:
        location = replace(location, include_dir=include_dir)
    env.trace(f"Located OpenSSL via {location.method}: lib={location.lib_dir} include={location.include_dir}")
    return _check_exists(location)
