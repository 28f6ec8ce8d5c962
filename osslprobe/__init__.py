import json
import os
import sys
from collections.abc import (
    Mapping,
)
from dataclasses import (
    dataclass,
)
from importlib.metadata import (
    version as get_version,
)
from typing import (
    Any,
)

import click

from .cfgs import (
    MajorLine,
)
from .directives import (
    Directive,
    emit,
    render,
)
from .env import (
    Environment,
    _debug_print,
    host_triple,
)
from .errors import (
    BuildError,
)
from .link import (
    LinkKind,
    LinkPlan,
    plan_link,
)
from .locate import (
    LibraryLocation,
    PkgConfigQuery,
    VcpkgQuery,
    find_openssl,
)
from .preprocessors import (
    Preprocessor,
)
from .probe import (
    HeaderFacts,
    validate_headers,
)
from .tables import (
    STATIC_PATTERNS,
)
from .vendor import (
    VendoredBuilder,
)
from .version import (
    format_version,
)

__version__ = get_version("osslprobe")


@dataclass(frozen=True)
class BuildConfig:
    """Everything one configuration run decided.

    :param target: Target triple the run configured for.
    :param location: Where OpenSSL was found.
    :param facts: Version, major line, configuration flags and tiers.
    :param plan: How to link.
    :param directives: The emitted directive stream.
    """

    target: str
    location: LibraryLocation
    facts: HeaderFacts
    plan: LinkPlan
    directives: tuple[Directive, ...]

    @property
    def version(self) -> int:
        return self.facts.version

    @property
    def major_line(self) -> MajorLine:
        return self.facts.major_line

    @property
    def cfgs(self) -> list[str]:
        """All conditional-compilation facts, as emitted."""
        return [d.value for d in self.directives if d.key == "cfg"]

    def has_cfg(self, name: str) -> bool:
        return name in self.facts.tiers or name in self.facts.conf

    def setuptools_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``setuptools.Extension`` or cffi's ``set_source``.

        Static archives are passed as ``extra_objects`` so the linker cannot
        pick a shared library of the same name from another directory.
        """
        libraries: list[str] = []
        extra_objects: list[str] = []
        for lib in self.plan.libs:
            archive = None
            if self.plan.kind is LinkKind.STATIC:
                archive = _find_archive(self.location.lib_dir, lib)
            if archive is None:
                libraries.append(lib)
            else:
                extra_objects.append(archive)
        libraries.extend(self.plan.system_libs)

        define_macros = [(f"OSSLPROBE_{tier.upper()}", "1") for tier in self.facts.tiers]
        define_macros.append(("OSSLPROBE_VERSION_NUMBER", f"0x{self.version:x}"))
        return {
            "include_dirs": [self.location.include_dir],
            "library_dirs": [self.location.lib_dir],
            "libraries": libraries,
            "extra_objects": extra_objects,
            "define_macros": define_macros,
        }


def _find_archive(lib_dir: str, lib: str) -> str | None:
    for pattern in STATIC_PATTERNS:
        path = os.path.join(lib_dir, pattern.format(lib))
        if os.path.exists(path):
            return path
    return None


def configure(
    target: str | None = None,
    host: str | None = None,
    vendored: bool = False,
    environ: Mapping[str, str] | None = None,
    debug: bool = False,
    prefer: LinkKind = LinkKind.DYLIB,
    builder: VendoredBuilder | None = None,
    preprocessor: Preprocessor | None = None,
    pkg_config: PkgConfigQuery | None = None,
    vcpkg: VcpkgQuery | None = None,
) -> BuildConfig:
    """Locate, probe and plan the OpenSSL link for one build.

    Args:
        target: Target triple; defaults to ``$TARGET`` or the running
            interpreter's platform.
        host: Host triple; defaults to ``$HOST`` or the running platform.
        vendored: Build OpenSSL from source (see :mod:`osslprobe.vendor`)
            unless ``OPENSSL_NO_VENDOR`` disables it.
        environ: Environment to read; defaults to :data:`os.environ`.
        debug: Trace lookups and decisions to stderr.
        prefer: Link kind used when both static and shared libraries exist.
        builder: Vendored builder override.
        preprocessor: Preprocessor backend override.
        pkg_config: pkg-config query override.
        vcpkg: vcpkg query override.

    Returns:
        The :class:`BuildConfig` of the run.

    Raises:
        BuildError: On any failure; the build cannot continue.
    """
    if environ is None:
        environ = os.environ
    env = Environment(target or "", environ, debug=debug)
    target = target or env.raw("TARGET") or host_triple()
    host = host or env.raw("HOST") or host_triple()
    env.target = target
    if debug:
        _debug_print(f"Host: {host}")
        _debug_print(f"Target: {target}")

    location = find_openssl(env, host, vendored=vendored, builder=builder, pkg_config=pkg_config, vcpkg=vcpkg)
    facts = validate_headers([location.include_dir], env, preprocessor)
    plan = plan_link(location.lib_dir, target, facts.major_line, env, prefer)

    if debug:
        _debug_print(f"OpenSSL {format_version(facts.version)}: link {plan.kind.value} {', '.join(plan.libs)}")

    directives = emit(location, facts, plan, env.consulted)
    return BuildConfig(
        target=target,
        location=location,
        facts=facts,
        plan=plan,
        directives=tuple(directives),
    )


CONTEXT_SETTINGS: dict[str, list[str]] = dict(help_option_names=["-h", "--help"])

PREFIX_WARNING = """Warning: OpenSSL was found by searching conventional install prefixes ({path}).
Set OPENSSL_DIR to choose an installation explicitly."""


@click.command(
    context_settings=CONTEXT_SETTINGS,
    help="""Locate OpenSSL, check its version and print build directives.

\b
Environment variables (optionally prefixed with the uppercased target,
e.g. X86_64_UNKNOWN_LINUX_GNU_OPENSSL_DIR):
  OPENSSL_DIR, OPENSSL_LIB_DIR, OPENSSL_INCLUDE_DIR, OPENSSL_STATIC,
  OPENSSL_LIBS, OPENSSL_NO_VENDOR, OPENSSL_SRC_DIR
""",
)
@click.option("--version", "-v", is_flag=True, help="Print version and exit.")
@click.option("--target", metavar="<triple>", help="Target triple (default: $TARGET or this platform).")
@click.option("--host", metavar="<triple>", help="Host triple (default: $HOST or this platform).")
@click.option("--vendored", is_flag=True, help="Build OpenSSL from OPENSSL_SRC_DIR.")
@click.option(
    "--prefer-static",
    is_flag=True,
    help="Link statically when both static and shared libraries exist.",
)
@click.option("--json", "json_output", is_flag=True, help="JSON output.")
@click.option(
    "--setuptools",
    is_flag=True,
    help="Print setuptools/cffi Extension keyword arguments as JSON.",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress warnings.")
@click.option("--debug/--no-debug", default=False, help="Print debug info to stderr.")
def cli(
    version: bool,
    target: str | None,
    host: str | None,
    vendored: bool,
    prefer_static: bool,
    json_output: bool,
    setuptools: bool,
    quiet: bool,
    debug: bool,
) -> None:
    if version:
        print(__version__)
        return

    if json_output and setuptools:
        click.echo("Error: --json and --setuptools are mutually exclusive", err=True)
        raise SystemExit(1)

    try:
        config = configure(
            target=target,
            host=host,
            vendored=vendored,
            debug=debug,
            prefer=LinkKind.STATIC if prefer_static else LinkKind.DYLIB,
        )
    except BuildError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e

    if config.location.method == "prefix" and not quiet:
        click.echo(PREFIX_WARNING.format(path=config.location.include_dir), err=True)

    if setuptools:
        print(json.dumps(config.setuptools_kwargs()))
    elif json_output:
        output = {
            "target": config.target,
            "version": format_version(config.version),
            "version_number": f"{config.version:x}",
            "major_line": config.major_line.tag,
            "method": config.location.method,
            "directives": [{"key": d.key, "value": d.value} for d in config.directives],
        }
        print(json.dumps(output))
    else:
        sys.stdout.write(render(config.directives))
