"""Tests for the directive stream."""

from osslprobe.cfgs import MajorLine
from osslprobe.directives import Directive, emit, render
from osslprobe.link import LinkKind, LinkPlan
from osslprobe.locate import LibraryLocation
from osslprobe.probe import HeaderFacts
from osslprobe.tables import WINDOWS_STATIC_SYSTEM_LIBS

LOCATION = LibraryLocation("/opt/ssl/lib", "/opt/ssl/include", "openssl_dir")
FACTS = HeaderFacts(
    version=0x30000020,
    major_line=MajorLine.OPENSSL_300,
    conf=frozenset({"OPENSSL_NO_SRP", "OPENSSL_NO_ENGINE"}),
    tiers=("ossl300", "ossl111c", "ossl111b", "ossl111"),
)


def test_full_stream_order() -> None:
    plan = LinkPlan(LinkKind.DYLIB, ("ssl", "crypto"))
    lines = render(emit(LOCATION, FACTS, plan, ["OPENSSL_DIR"])).splitlines()
    assert lines == [
        "osslprobe:link-search=native=/opt/ssl/lib",
        "osslprobe:include=/opt/ssl/include",
        "osslprobe:link-lib=dylib=ssl",
        "osslprobe:link-lib=dylib=crypto",
        'osslprobe:cfg=osslconf="OPENSSL_NO_ENGINE"',
        'osslprobe:cfg=osslconf="OPENSSL_NO_SRP"',
        "osslprobe:conf=OPENSSL_NO_ENGINE,OPENSSL_NO_SRP",
        "osslprobe:cfg=ossl300",
        "osslprobe:cfg=ossl111c",
        "osslprobe:cfg=ossl111b",
        "osslprobe:cfg=ossl111",
        "osslprobe:version_number=30000020",
        "osslprobe:version=300",
        "osslprobe:rerun-if-env-changed=OPENSSL_DIR",
    ]


def test_static_windows_system_libs_follow_openssl() -> None:
    plan = LinkPlan(LinkKind.STATIC, ("libssl", "libcrypto"), WINDOWS_STATIC_SYSTEM_LIBS)
    links = [d.value for d in emit(LOCATION, FACTS, plan) if d.key == "link-lib"]
    assert links == [
        "static=libssl",
        "static=libcrypto",
        "dylib=gdi32",
        "dylib=user32",
        "dylib=crypt32",
        "dylib=ws2_32",
        "dylib=advapi32",
    ]


def test_empty_conf() -> None:
    facts = HeaderFacts(0x1010100F, MajorLine.OPENSSL_111, frozenset(), ("ossl111",))
    directives = emit(LOCATION, facts, LinkPlan(LinkKind.DYLIB, ()))
    assert Directive("conf", "") in directives
    assert Directive("version", "111") in directives
    assert Directive("version_number", "1010100f") in directives
    assert not any(d.key == "link-lib" for d in directives)


def test_render_prefix() -> None:
    assert render([Directive("cfg", "ossl111")], prefix="cargo") == "cargo:cfg=ossl111\n"
