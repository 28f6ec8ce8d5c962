"""MSVC preprocessor backend (``cl.exe /E``)."""

from __future__ import (
    annotations,
)

import subprocess
from collections.abc import (
    Sequence,
)

from osslprobe.preprocessors import (
    register_preprocessor,
)


class MsvcPreprocessor:
    """Expand sources with ``cl.exe``.

    ``cl.exe`` must be reachable, normally from a Visual Studio developer
    prompt. Diagnostics go to stderr; the expanded text to stdout.
    """

    def __init__(self, compiler: str | None = None) -> None:
        self.compiler = compiler or "cl.exe"

    @property
    def name(self) -> str:
        return "msvc"

    def expand(self, source: str, include_dirs: Sequence[str]) -> str:
        cmd = [self.compiler, "/nologo", "/E"]
        cmd += [f"/I{inc}" for inc in include_dirs]
        cmd.append(source)

        result = subprocess.run(cmd, capture_output=True)
        if result.returncode != 0:
            raise RuntimeError(
                f"cl.exe failed (exit {result.returncode}): "
                f"{result.stderr.decode('utf-8', errors='replace')}{result.stdout.decode('utf-8', errors='replace')}"
            )
        return result.stdout.decode("utf-8", errors="replace").replace("\r\n", "\n")


register_preprocessor("msvc", MsvcPreprocessor)
