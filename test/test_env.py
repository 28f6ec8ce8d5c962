"""Tests for target-aware environment lookups."""

from osslprobe.env import Environment, host_triple, target_prefix


class TestTargetPrefix:
    def test_uppercases_and_underscores(self) -> None:
        assert target_prefix("aarch64-unknown-linux-gnu") == "AARCH64_UNKNOWN_LINUX_GNU"


class TestEnvironment:
    def test_bare_name(self, make_env) -> None:
        env = make_env({"OPENSSL_DIR": "/opt/ssl"})
        assert env.get("OPENSSL_DIR") == "/opt/ssl"

    def test_prefixed_name_wins(self, make_env) -> None:
        env = make_env(
            {
                "X86_64_UNKNOWN_LINUX_GNU_OPENSSL_DIR": "/cross/ssl",
                "OPENSSL_DIR": "/opt/ssl",
            }
        )
        assert env.get("OPENSSL_DIR") == "/cross/ssl"

    def test_empty_prefixed_value_still_wins(self, make_env) -> None:
        env = make_env({"X86_64_UNKNOWN_LINUX_GNU_OPENSSL_LIBS": "", "OPENSSL_LIBS": "ssl"})
        assert env.get("OPENSSL_LIBS") == ""

    def test_other_target_prefix_ignored(self, make_env) -> None:
        env = make_env({"AARCH64_UNKNOWN_LINUX_GNU_OPENSSL_DIR": "/cross/ssl"})
        assert env.get("OPENSSL_DIR") is None

    def test_records_consulted_names(self, make_env) -> None:
        env = make_env({"X86_64_UNKNOWN_LINUX_GNU_OPENSSL_STATIC": "1"})
        env.get("OPENSSL_DIR")
        env.get("OPENSSL_STATIC")
        env.get("OPENSSL_DIR")
        assert env.consulted == [
            "X86_64_UNKNOWN_LINUX_GNU_OPENSSL_DIR",
            "OPENSSL_DIR",
            "X86_64_UNKNOWN_LINUX_GNU_OPENSSL_STATIC",
        ]

    def test_raw_skips_prefix(self, make_env) -> None:
        env = make_env({"VCPKG_ROOT": "C:/vcpkg"})
        assert env.raw("VCPKG_ROOT") == "C:/vcpkg"
        assert env.consulted == ["VCPKG_ROOT"]

    def test_debug_trace(self, capsys) -> None:
        env = Environment("x86_64-unknown-linux-gnu", {"OPENSSL_DIR": "/opt/ssl"}, debug=True)
        env.get("OPENSSL_DIR")
        err = capsys.readouterr().err
        assert "[osslprobe] X86_64_UNKNOWN_LINUX_GNU_OPENSSL_DIR unset" in err
        assert "[osslprobe] OPENSSL_DIR = /opt/ssl" in err

    def test_child_environ_overlays_mapping(self, make_env, monkeypatch) -> None:
        monkeypatch.setenv("OSSLPROBE_TEST_INHERITED", "os")
        monkeypatch.setenv("PKG_CONFIG_PATH", "/from/os")
        child = make_env({"PKG_CONFIG_PATH": "/from/mapping"}).child_environ()
        assert child["PKG_CONFIG_PATH"] == "/from/mapping"
        assert child["OSSLPROBE_TEST_INHERITED"] == "os"

    def test_quiet_by_default(self, make_env, capsys) -> None:
        make_env({"OPENSSL_DIR": "/opt/ssl"}).get("OPENSSL_DIR")
        assert capsys.readouterr().err == ""


def test_host_triple_shape() -> None:
    triple = host_triple()
    assert triple.count("-") >= 2
    assert triple == triple.lower()
