"""Header probe: learn OpenSSL's version and configuration from its headers.

A small C source including ``<openssl/opensslconf.h>`` and
``<openssl/opensslv.h>`` is run through the target's C preprocessor. The
source turns the header's own macros into sentinel identifiers, one per line,
which survive preprocessing verbatim:

* ``OSSLPROBE_VERSION_OPENSSL_0x1010107fL`` for pre-3.0 headers,
* ``OSSLPROBE_VERSION_NEW_OPENSSL_3_0_2`` for 3.x headers,
* ``OSSLPROBE_CONF_OPENSSL_NO_ENGINE`` for each defined configuration macro.

Everything else in the expanded output is ignored.

Example
-------
::

    from osslprobe.probe import parse_probe_output

    result = parse_probe_output("OSSLPROBE_VERSION_NEW_OPENSSL_3_0_2\\nOSSLPROBE_CONF_OPENSSL_NO_ENGINE\\n")
    result.version  # 0x30000020
    result.conf     # frozenset({"OPENSSL_NO_ENGINE"})
"""

from __future__ import (
    annotations,
)

import os
import tempfile
from collections.abc import (
    Iterable,
    Sequence,
)
from dataclasses import (
    dataclass,
    field,
)

from osslprobe import (
    cfgs,
)
from osslprobe.cfgs import (
    MajorLine,
)
from osslprobe.env import (
    Environment,
)
from osslprobe.errors import (
    ProbeError,
)
from osslprobe.preprocessors import (
    Preprocessor,
    get_preprocessor,
    preprocessor_for_target,
)
from osslprobe.tables import (
    CONFIG_MACROS,
)
from osslprobe.version import (
    VersionText,
    format_version,
)

LEGACY_PREFIX = "OSSLPROBE_VERSION_OPENSSL_"
MODERN_PREFIX = "OSSLPROBE_VERSION_NEW_OPENSSL_"
CONF_PREFIX = "OSSLPROBE_CONF_"

_PROBE_HEADER = f"""\
#include <openssl/opensslconf.h>
#include <openssl/opensslv.h>

#define VERSION2(n, v) OSSLPROBE_VERSION_##n##_##v
#define VERSION(n, v) VERSION2(n, v)

#define NEW_VERSION2(a, b, c) {MODERN_PREFIX}##a##_##b##_##c
#define NEW_VERSION(a, b, c) NEW_VERSION2(a, b, c)

#if defined(OPENSSL_VERSION_MAJOR)
NEW_VERSION(OPENSSL_VERSION_MAJOR, OPENSSL_VERSION_MINOR, OPENSSL_VERSION_PATCH)
#else
VERSION(OPENSSL, OPENSSL_VERSION_NUMBER)
#endif
"""


def probe_source(config_macros: Iterable[str] = CONFIG_MACROS) -> str:
    """Build the probe's C source for the given configuration macros."""
    lines = [_PROBE_HEADER]
    for macro in config_macros:
        lines.append(f"#ifdef {macro}\n{CONF_PREFIX}{macro}\n#endif\n")
    return "\n".join(lines)


PROBE_SOURCE = probe_source()

HEADER_ERROR = """
Header expansion error:
{error}

Failed to find OpenSSL development headers in: {dirs}

You can try fixing this setting the `OPENSSL_DIR` environment variable
pointing to your OpenSSL installation or installing OpenSSL headers package
specific to your distribution:

    # On Ubuntu
    sudo apt-get install libssl-dev
    # On Arch Linux
    sudo pacman -S openssl
    # On Fedora
    sudo dnf install openssl-devel
"""


@dataclass(frozen=True)
class ProbeResult:
    """Raw facts read from the expanded probe.

    :param version_text: The version sentinel payload and its format.
    :param conf: Configuration macros the headers define.
    """

    version_text: VersionText
    conf: frozenset[str] = field(default_factory=frozenset)

    @property
    def version(self) -> int:
        return self.version_text.decode()


@dataclass(frozen=True)
class HeaderFacts:
    """Validated result of probing a set of include directories."""

    version: int
    major_line: MajorLine
    conf: frozenset[str]
    tiers: tuple[str, ...]


def expand(
    source: str,
    include_dirs: Sequence[str],
    preprocessor: Preprocessor,
) -> str:
    """Preprocess ``source`` text against ``include_dirs``.

    :raises ProbeError: If the preprocessor fails or cannot be run. The
        message carries the remediation for missing development headers.
    """
    with tempfile.TemporaryDirectory(prefix="osslprobe-") as tmp:
        path = os.path.join(tmp, "expando.c")
        with open(path, "w", encoding="utf-8") as f:
            f.write(source)
        try:
            return preprocessor.expand(path, include_dirs)
        except (RuntimeError, OSError) as e:
            dirs = ", ".join(str(d) for d in include_dirs) or "(default search path)"
            raise ProbeError(HEADER_ERROR.format(error=e, dirs=dirs)) from e


def parse_probe_output(expanded: str) -> ProbeResult:
    """Collect sentinel lines from preprocessed probe output.

    When both version sentinel kinds appear, the last one wins.

    :raises ProbeError: If no version sentinel is present.
    """
    version_text: VersionText | None = None
    conf: set[str] = set()

    for line in expanded.splitlines():
        line = line.strip()
        if line.startswith(MODERN_PREFIX):
            version_text = VersionText("modern", line[len(MODERN_PREFIX) :])
        elif line.startswith(LEGACY_PREFIX):
            version_text = VersionText("legacy", line[len(LEGACY_PREFIX) :])
        elif line.startswith(CONF_PREFIX):
            conf.add(line[len(CONF_PREFIX) :])

    if version_text is None:
        raise ProbeError(
            "The OpenSSL headers did not report a version: neither "
            "OPENSSL_VERSION_MAJOR nor OPENSSL_VERSION_NUMBER expanded in <openssl/opensslv.h>."
        )
    return ProbeResult(version_text=version_text, conf=frozenset(conf))


def validate_headers(
    include_dirs: Sequence[str],
    env: Environment,
    preprocessor: Preprocessor | None = None,
) -> HeaderFacts:
    """Probe the headers in ``include_dirs`` and check the version.

    :param include_dirs: Directories searched for ``openssl/*.h``.
    :param env: Build environment; ``CC`` selects the compiler.
    :param preprocessor: Backend to use; chosen from the target if None.
    :raises ProbeError: On preprocessing failure.
    :raises MalformedVersionError: If the version text cannot be decoded.
    :raises UnsupportedVersionError: If the version is not supported.
    """
    if preprocessor is None:
        preprocessor = get_preprocessor(preprocessor_for_target(env.target), env.get("CC"))
    env.trace(f"Probing headers in {', '.join(include_dirs)} with {preprocessor.name}")

    result = parse_probe_output(expand(PROBE_SOURCE, include_dirs, preprocessor))
    env.trace(f"Version text: {result.version_text.kind} {result.version_text.text}")

    version = result.version
    major_line = cfgs.classify(version)
    env.trace(f"Found OpenSSL {format_version(version)} (0x{version:x})")

    return HeaderFacts(
        version=version,
        major_line=major_line,
        conf=result.conf,
        tiers=tuple(cfgs.get(version)),
    )
