"""C preprocessor backends for the header probe.

The probe needs a real preprocessor running in expand-only mode: OpenSSL's
configuration headers define macros conditionally, and only the compiler that
will build the bindings knows how they resolve.

Available Backends
------------------
cc
    Any gcc/clang compatible driver invoked as ``<cc> -E``. Default backend.

msvc
    Microsoft ``cl.exe`` invoked as ``cl.exe /nologo /E``. Selected for
    ``*-windows-msvc`` targets.

Example
-------
::

    from osslprobe.preprocessors import get_preprocessor

    pp = get_preprocessor("cc")
    text = pp.expand("probe.c", ["/usr/include"])
"""

from __future__ import (
    annotations,
)

from collections.abc import (
    Sequence,
)
from typing import (
    Protocol,
)


class Preprocessor(Protocol):
    """Protocol implemented by every preprocessor backend."""

    @property
    def name(self) -> str: ...

    def expand(self, source: str, include_dirs: Sequence[str]) -> str:
        """Expand ``source`` (a file path) and return the preprocessed text.

        :raises RuntimeError: If the preprocessor exits unsuccessfully.
        :raises OSError: If the preprocessor cannot be started.
        """
        ...


# Registry of available backends
_BACKEND_REGISTRY: dict[str, type] = {}
_DEFAULT_BACKEND: str | None = None
_BACKENDS_LOADED: bool = False


def register_preprocessor(name: str, backend_class: type, is_default: bool = False) -> None:
    """Register a preprocessor backend.

    Called by backend modules during import. The first registered backend
    becomes the default unless ``is_default`` is set on a later registration.

    :param name: Unique name for the backend (e.g., ``"cc"``, ``"msvc"``).
    :param backend_class: Class implementing :class:`Preprocessor`. It is
        constructed with a single optional ``compiler`` argument.
    :param is_default: If True, this becomes the default backend.
    """
    global _DEFAULT_BACKEND  # pylint: disable=global-statement
    _BACKEND_REGISTRY[name] = backend_class
    if is_default or _DEFAULT_BACKEND is None:
        _DEFAULT_BACKEND = name


def list_preprocessors() -> list[str]:
    """List names of all registered backends."""
    _ensure_backends_loaded()
    return list(_BACKEND_REGISTRY.keys())


def get_preprocessor(name: str | None = None, compiler: str | None = None) -> Preprocessor:
    """Get a preprocessor backend instance.

    :param name: Backend name, or None for the default backend.
    :param compiler: Compiler executable overriding the backend's default.
    :raises ValueError: If the requested backend is not registered.
    """
    _ensure_backends_loaded()

    if name is None:
        if _DEFAULT_BACKEND is None:
            raise ValueError("No preprocessor backends available")
        name = _DEFAULT_BACKEND

    if name not in _BACKEND_REGISTRY:
        available = ", ".join(_BACKEND_REGISTRY.keys()) or "(none)"
        raise ValueError(f"Unknown preprocessor: {name!r}. Available: {available}")

    return _BACKEND_REGISTRY[name](compiler)  # type: ignore[no-any-return]


def preprocessor_for_target(target: str) -> str:
    """Name of the backend that matches ``target``'s toolchain."""
    if "windows-msvc" in target:
        return "msvc"
    return "cc"


def _ensure_backends_loaded() -> None:
    """Lazily load backend modules to populate the registry."""
    global _BACKENDS_LOADED  # pylint: disable=global-statement

    if _BACKENDS_LOADED:
        return

    _BACKENDS_LOADED = True

    # pylint: disable=import-outside-toplevel
    from osslprobe.preprocessors import (  # noqa: F401
        cc,
        msvc,
    )
