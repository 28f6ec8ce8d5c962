"""Shared pytest fixtures for osslprobe tests."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import pytest

from osslprobe.env import Environment

LINUX = "x86_64-unknown-linux-gnu"


class FakePreprocessor:
    """Preprocessor backend returning canned output.

    Records every call so tests can check which include dirs were probed.
    """

    name = "fake"

    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    def expand(self, source: str, include_dirs: Sequence[str]) -> str:
        with open(source, encoding="utf-8") as f:
            self.calls.append((f.read(), list(include_dirs)))
        if self.error is not None:
            raise self.error
        return self.output


def probe_output(version: str, conf: Sequence[str] = (), modern: bool = False) -> str:
    """Expanded probe text as a preprocessor would print it."""
    lines = ['# 1 "expando.c"', '# 1 "/usr/include/openssl/opensslv.h" 1 3 4', ""]
    if modern:
        lines.append(f"OSSLPROBE_VERSION_NEW_OPENSSL_{version}")
    else:
        lines.append(f"OSSLPROBE_VERSION_OPENSSL_{version}")
    for flag in conf:
        lines.append(f"OSSLPROBE_CONF_{flag}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_env():
    """Factory for an :class:`Environment` over a plain dict."""

    def _make(environ: dict[str, str] | None = None, target: str = LINUX) -> Environment:
        return Environment(target, environ or {})

    return _make


@pytest.fixture
def openssl_prefix(tmp_path: Path):
    """Factory creating a fake OpenSSL install prefix.

    ``libs`` are file names created in ``<prefix>/lib``; headers are empty
    placeholders, the probe output is faked separately.
    """

    def _make(libs: Sequence[str] = ("libssl.so", "libcrypto.so"), name: str = "openssl") -> Path:
        prefix = tmp_path / name
        (prefix / "include" / "openssl").mkdir(parents=True)
        (prefix / "include" / "openssl" / "opensslv.h").write_text("", encoding="utf-8")
        (prefix / "lib").mkdir()
        for lib in libs:
            (prefix / "lib" / lib).write_bytes(b"")
        return prefix

    return _make


@pytest.fixture
def lib_dir(tmp_path: Path):
    """Factory for a directory containing the given file names."""

    def _make(*files: str) -> str:
        d = tmp_path / "lib"
        d.mkdir(exist_ok=True)
        for name in files:
            (d / name).write_bytes(b"")
        return os.fspath(d)

    return _make


@pytest.fixture
def fake_preprocessor():
    """The :class:`FakePreprocessor` class, for building canned backends."""
    return FakePreprocessor


@pytest.fixture
def probe_text():
    """The :func:`probe_output` helper."""
    return probe_output
