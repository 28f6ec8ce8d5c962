"""Vendored OpenSSL builds.

A vendored builder turns an OpenSSL source tree into a static library and
headers for one target. The pipeline only relies on the
:class:`VendoredBuilder` protocol; :class:`SourceTreeBuilder` is the default
implementation, driving OpenSSL's own ``Configure`` script and ``make``.
"""

from __future__ import (
    annotations,
)

import os
import shutil
import subprocess
from pathlib import (
    Path,
)
from typing import (
    Protocol,
)

from osslprobe.env import (
    Environment,
)
from osslprobe.errors import (
    VendorError,
)
from osslprobe.tables import (
    VENDOR_TARGETS,
)


class VendoredBuilder(Protocol):
    def build(self, target: str) -> tuple[str, str]:
        """Build OpenSSL for ``target``; return ``(lib_dir, include_dir)``.

        :raises VendorError: If ``target`` cannot be built.
        """
        ...


class SourceTreeBuilder:
    """Build OpenSSL from a source tree selected by ``OPENSSL_SRC_DIR``.

    The tree is copied into ``<out_dir>/build`` so the original is never
    touched, configured with ``no-shared`` and installed into
    ``<out_dir>/install``. An existing install is reused.

    :param env: Build environment.
    :param source_dir: OpenSSL source tree; overrides ``OPENSSL_SRC_DIR``.
    :param out_dir: Output directory; defaults to ``./openssl-build/<target>``.
    """

    def __init__(
        self,
        env: Environment,
        source_dir: str | None = None,
        out_dir: str | None = None,
    ) -> None:
        self.env = env
        self.source_dir = source_dir
        self.out_dir = out_dir

    def build(self, target: str) -> tuple[str, str]:
        source_dir = self.source_dir or self.env.get("OPENSSL_SRC_DIR")
        if not source_dir:
            raise VendorError(
                "A vendored OpenSSL build was requested but no source tree was selected.\n"
                "Set OPENSSL_SRC_DIR to an OpenSSL source checkout, or set OPENSSL_NO_VENDOR=1 "
                "to use a system installation instead."
            )
        if not (Path(source_dir) / "Configure").exists():
            raise VendorError(f"OpenSSL source not found at {source_dir} (no Configure script)")

        configure_target = VENDOR_TARGETS.get(target)
        if configure_target is None:
            raise VendorError(f"Don't know how to build a vendored OpenSSL for target {target!r}")

        out_dir = Path(self.out_dir) if self.out_dir else Path.cwd() / "openssl-build" / target
        install_dir = out_dir / "install"
        lib_dir = install_dir / "lib"
        include_dir = install_dir / "include"
        if (include_dir / "openssl" / "opensslv.h").exists() and lib_dir.is_dir():
            self.env.trace(f"Reusing vendored OpenSSL at {install_dir}")
            return str(lib_dir), str(include_dir)

        build_dir = out_dir / "build"
        shutil.copytree(source_dir, build_dir, dirs_exist_ok=True)

        perl = self.env.get("OPENSSL_SRC_PERL") or "perl"
        make = "nmake" if "windows-msvc" in target else "make"
        jobs = os.cpu_count() or 1

        self.env.trace(f"Building vendored OpenSSL ({configure_target}) in {build_dir}")
        self._run(
            [
                perl,
                "Configure",
                configure_target,
                f"--prefix={install_dir}",
                f"--openssldir={install_dir / 'ssl'}",
                "--libdir=lib",
                "no-shared",
                "no-tests",
            ],
            build_dir,
        )
        if make == "make":
            self._run([make, f"-j{jobs}"], build_dir)
        else:
            self._run([make], build_dir)
        self._run([make, "install_sw"], build_dir)

        return str(lib_dir), str(include_dir)

    def _run(self, cmd: list[str], cwd: Path) -> None:
        try:
            subprocess.run(
                cmd,
                check=True,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except subprocess.CalledProcessError as e:
            output = e.stdout.decode(errors="replace") if e.stdout else ""
            raise VendorError(f"Vendored OpenSSL build failed: {' '.join(cmd)}\n{output}") from e
        except OSError as e:
            raise VendorError(f"Could not run {cmd[0]!r} for the vendored OpenSSL build: {e}") from e
