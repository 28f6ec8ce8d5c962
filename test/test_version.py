"""Tests for version decoding."""

import pytest

from osslprobe.errors import MalformedVersionError
from osslprobe.version import VersionText, decode_legacy, decode_modern, format_version


class TestDecodeLegacy:
    """Tests for the OPENSSL_VERSION_NUMBER hex literal."""

    def test_long_suffix(self) -> None:
        assert decode_legacy("0x100020cfL") == 0x100020CF

    @pytest.mark.parametrize("suffix", ["", "L", "UL", "ULL", "u"])
    def test_suffix_of_any_length_is_stripped(self, suffix: str) -> None:
        assert decode_legacy(f"0x1010107f{suffix}") == 0x1010107F

    def test_uppercase_digits(self) -> None:
        assert decode_legacy("0x1010107FL") == 0x1010107F

    @pytest.mark.parametrize("text", ["1010107fL", "0x", "0xL", "", "OPENSSL_VERSION_NUMBER", "0x1fL1"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(MalformedVersionError):
            decode_legacy(text)

    def test_malformed_is_value_error(self) -> None:
        """Malformed versions are also plain ValueErrors."""
        with pytest.raises(ValueError):
            decode_legacy("nope")


class TestDecodeModern:
    """Tests for the <major>_<minor>_<patch> triple."""

    def test_three_zero_zero(self) -> None:
        assert decode_modern("3_0_0") == (3 << 28) | (0 << 20) | (0 << 4)

    def test_packs_all_components(self) -> None:
        assert decode_modern("3_2_1") == 0x30200010

    @pytest.mark.parametrize("text", ["3_0", "3_0_0_0", "3_0_x", "3.0.0", "", "3__0", "-3_0_0"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(MalformedVersionError):
            decode_modern(text)

    @pytest.mark.parametrize("text", ["3_256_0", "3_0_65536", "16_0_0"])
    def test_component_out_of_range(self, text: str) -> None:
        with pytest.raises(MalformedVersionError, match="out of range"):
            decode_modern(text)

    def test_largest_components_stay_ordered(self) -> None:
        assert decode_modern("3_255_65535") < decode_modern("4_0_0")


class TestOrdering:
    """Both formats share one monotonic scale."""

    def test_formats_agree_for_3x(self) -> None:
        """OpenSSL 3.x reports the same release in both formats."""
        assert decode_legacy("0x30000020L") == decode_modern("3_0_2")
        assert decode_legacy("0x30100000L") == decode_modern("3_1_0")

    def test_chronological_order(self) -> None:
        releases = [
            decode_legacy("0x1000207fL"),  # 1.0.2g
            decode_legacy("0x1010007fL"),  # 1.1.0g
            decode_legacy("0x1010100fL"),  # 1.1.1
            decode_legacy("0x1010102fL"),  # 1.1.1b
            decode_legacy("0x1010117fL"),  # 1.1.1w
            decode_modern("3_0_0"),
            decode_modern("3_0_13"),
            decode_modern("3_1_0"),
            decode_modern("3_2_1"),
        ]
        assert releases == sorted(releases)
        assert len(set(releases)) == len(releases)


class TestVersionText:
    def test_dispatches_on_kind(self) -> None:
        assert VersionText("legacy", "0x1010103fL").decode() == 0x1010103F
        assert VersionText("modern", "3_0_2").decode() == 0x30000020


class TestFormatVersion:
    @pytest.mark.parametrize(
        "number, expected",
        [
            (0x1010100F, "1.1.1"),
            (0x1010103F, "1.1.1c"),
            (0x1000215F, "1.0.2u"),
            (0x100021BF, "1.0.2za"),
            (0x30000020, "3.0.2"),
            (0x30200010, "3.2.1"),
        ],
    )
    def test_format(self, number: int, expected: str) -> None:
        assert format_version(number) == expected
