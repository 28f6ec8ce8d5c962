"""Process-wide OpenSSL initialization for the built bindings.

OpenSSL must be initialized explicitly before first use from multiple
threads. :func:`init` performs ``OPENSSL_init_ssl`` exactly once per process,
no matter how many threads call it concurrently; every caller returns only
after initialization has completed.

The shared library is loaded with cffi in ABI mode, so no compiled shim is
needed.
"""

from __future__ import (
    annotations,
)

import ctypes.util
import os
import sys
import threading
from collections.abc import (
    Callable,
    Iterable,
)
from typing import (
    Any,
)

from cffi import (
    FFI,
)

OPENSSL_INIT_NO_ATEXIT = 0x00080000
OPENSSL_INIT_LOAD_SSL_STRINGS = 0x00200000

ffi = FFI()
ffi.cdef(
    """
    int OPENSSL_init_ssl(uint64_t opts, const void *settings);
    """
)


class Once:
    """Run a callable exactly once across all threads.

    The done flag is only ever read and written while holding the lock, so a
    caller arriving during initialization blocks until it finishes. If the
    callable raises, the exception propagates to its caller and the next
    caller runs it again.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    def call_once(self, fn: Callable[[], object]) -> None:
        with self._lock:
            if not self._done:
                fn()
                self._done = True

    @property
    def is_completed(self) -> bool:
        with self._lock:
            return self._done


def init_options(cfgs: Iterable[str] = ()) -> int:
    """``OPENSSL_init_ssl`` options for a build with the given facts.

    ``OPENSSL_INIT_NO_ATEXIT`` exists from 1.1.1b on; older libraries reject
    unknown flags.
    """
    options = OPENSSL_INIT_LOAD_SSL_STRINGS
    if "ossl111b" in cfgs:
        options |= OPENSSL_INIT_NO_ATEXIT
    return options


def _candidate_names() -> list[str]:
    names: list[str] = []
    p = os.environ.get("OSSLPROBE_LIBSSL_PATH")
    if p:
        names.append(p)
    for lib in ("ssl", "libssl-3-x64", "libssl-3", "libssl-1_1-x64", "libssl-1_1"):
        found = ctypes.util.find_library(lib)
        if found:
            names.append(found)
    if sys.platform == "darwin":
        names.append("libssl.dylib")
    elif os.name != "nt":
        names.extend(["libssl.so.3", "libssl.so.1.1", "libssl.so"])
    return names


def load_libssl() -> Any:
    """Load libssl, trying ``OSSLPROBE_LIBSSL_PATH`` first.

    :raises OSError: If no candidate can be loaded.
    """
    last_err: Exception | None = None
    for name in _candidate_names():
        try:
            return ffi.dlopen(name)
        except OSError as e:  # try next candidate
            last_err = e
    raise OSError(
        f"Could not load libssl: {last_err}\n"
        "Set OSSLPROBE_LIBSSL_PATH to the full path of the OpenSSL ssl library."
    )


_INIT = Once()


def init(lib: Any = None, cfgs: Iterable[str] = ()) -> None:
    """Initialize OpenSSL once for this process.

    :param lib: Loaded library exposing ``OPENSSL_init_ssl``; loaded with
        :func:`load_libssl` if None.
    :param cfgs: Conditional-compilation facts of the build, used to pick
        the initialization options.
    :raises RuntimeError: If ``OPENSSL_init_ssl`` reports failure.
    """
    options = init_options(cfgs)

    def setup() -> None:
        target = lib if lib is not None else load_libssl()
        if target.OPENSSL_init_ssl(options, ffi.NULL) != 1:
            raise RuntimeError("OPENSSL_init_ssl failed")

    _INIT.call_once(setup)
