"""Build directives: the output of a configuration run.

Each :class:`Directive` is a ``key=value`` fact. Rendered as text they form
lines such as::

    osslprobe:link-search=native=/usr/lib/x86_64-linux-gnu
    osslprobe:include=/usr/include
    osslprobe:link-lib=dylib=ssl
    osslprobe:link-lib=dylib=crypto
    osslprobe:cfg=osslconf="OPENSSL_NO_SSL3_METHOD"
    osslprobe:conf=OPENSSL_NO_SSL3_METHOD
    osslprobe:cfg=ossl300
    osslprobe:cfg=ossl111c
    osslprobe:cfg=ossl111b
    osslprobe:cfg=ossl111
    osslprobe:version_number=30000020
    osslprobe:version=300
    osslprobe:rerun-if-env-changed=OPENSSL_DIR
"""

from __future__ import (
    annotations,
)

from collections.abc import (
    Iterable,
    Sequence,
)
from dataclasses import (
    dataclass,
)

from osslprobe.link import (
    LinkKind,
    LinkPlan,
)
from osslprobe.locate import (
    LibraryLocation,
)
from osslprobe.probe import (
    HeaderFacts,
)

DIRECTIVE_PREFIX = "osslprobe"


@dataclass(frozen=True)
class Directive:
    key: str
    value: str

    def render(self, prefix: str = DIRECTIVE_PREFIX) -> str:
        return f"{prefix}:{self.key}={self.value}"


def emit(
    location: LibraryLocation,
    facts: HeaderFacts,
    plan: LinkPlan,
    consulted: Sequence[str] = (),
) -> list[Directive]:
    """Turn the results of a run into directives, in their fixed order."""
    out = [
        Directive("link-search", f"native={location.lib_dir}"),
        Directive("include", location.include_dir),
    ]
    for lib in plan.libs:
        out.append(Directive("link-lib", f"{plan.kind.value}={lib}"))
    for lib in plan.system_libs:
        out.append(Directive("link-lib", f"{LinkKind.DYLIB.value}={lib}"))

    conf = sorted(facts.conf)
    for flag in conf:
        out.append(Directive("cfg", f'osslconf="{flag}"'))
    out.append(Directive("conf", ",".join(conf)))

    for tier in facts.tiers:
        out.append(Directive("cfg", tier))

    out.append(Directive("version_number", f"{facts.version:x}"))
    out.append(Directive("version", facts.major_line.tag))

    for name in consulted:
        out.append(Directive("rerun-if-env-changed", name))
    return out


def render(directives: Iterable[Directive], prefix: str = DIRECTIVE_PREFIX) -> str:
    """Render directives one per line, newline terminated."""
    return "".join(f"{d.render(prefix)}\n" for d in directives)
