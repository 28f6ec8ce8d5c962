"""gcc/clang style preprocessor backend (``cc -E``)."""

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


class CcPreprocessor:
    """Expand sources with a Unix C compiler driver.

    :param compiler: Compiler executable; defaults to ``cc``. A value with
        arguments (``"ccache clang"``, ``"zig cc"``) is split on whitespace.
    """

    def __init__(self, compiler: str | None = None) -> None:
        self.command = (compiler or "cc").split()

    @property
    def name(self) -> str:
        return "cc"

    def expand(self, source: str, include_dirs: Sequence[str]) -> str:
        cmd = [*self.command, "-E"]
        cmd += [f"-I{inc}" for inc in include_dirs]
        cmd.append(source)

        result = subprocess.run(cmd, capture_output=True)
        if result.returncode != 0:
            raise RuntimeError(
                f"C preprocessor failed (exit {result.returncode}): "
                f"{' '.join(cmd)}\n{result.stderr.decode('utf-8', errors='replace')}"
            )
        return result.stdout.decode("utf-8", errors="replace").replace("\r\n", "\n")


register_preprocessor("cc", CcPreprocessor, is_default=True)
