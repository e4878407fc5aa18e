"""Tests for the eMMC and UFS wear dump parsers."""

import pytest

from storage_monitor.errors import WearParseError
from storage_monitor.models import PreEolInfo, WearInformation
from storage_monitor.wear import (
    decode_lifetime,
    parse_emmc_wear,
    parse_ufs_wear,
    read_emmc_wear,
    read_ufs_wear,
)

UFS_DUMP = (
    "ufs version: 1.0\n"
    "Health Descriptor[Byte offset 0x2]: bPreEOLInfo = 0x2\n"
    "Health Descriptor[Byte offset 0x1]: bDescriptionIDN = 0x1\n"
    "Health Descriptor[Byte offset 0x3]: bDeviceLifeTimeEstA = 0x0\n"
    "Health Descriptor[Byte offset 0x5]: VendorPropInfo = somedatahere\n"
    "Health Descriptor[Byte offset 0x4]: bDeviceLifeTimeEstB = 0xA\n"
)


class TestDecodeLifetime:
    def test_zero_is_unknown(self):
        assert decode_lifetime(0) is None

    @pytest.mark.parametrize("code,percent", [(1, 0), (5, 40), (0x0A, 90), (0x0B, 100)])
    def test_codes_are_one_based_steps_of_ten(self, code, percent):
        assert decode_lifetime(code) == percent

    def test_code_above_range_fails(self):
        with pytest.raises(WearParseError):
            decode_lifetime(0x0C)


class TestEmmcWear:
    def test_lifetime_a_only(self):
        info = parse_emmc_wear("0x05 0x00", "01")
        assert info.lifetime_estimate_a == 40
        assert info.lifetime_estimate_b is None
        assert info.pre_eol_info == PreEolInfo.NORMAL

    def test_plain_hex_and_bytes_input(self):
        info = parse_emmc_wear(b"03 0B\n", b"03\n")
        assert info == WearInformation(20, 100, PreEolInfo.URGENT)

    @pytest.mark.parametrize("eol", ["00", "04", "zz", "", "01 02"])
    def test_bad_eol_fails(self, eol):
        with pytest.raises(WearParseError):
            parse_emmc_wear("0x01 0x01", eol)

    @pytest.mark.parametrize("lifetime", ["0x05", "0x05 0x01 0x02", "0x05 nothex", ""])
    def test_bad_lifetime_fails(self, lifetime):
        with pytest.raises(WearParseError):
            parse_emmc_wear(lifetime, "01")

    def test_read_from_files(self, write_file):
        lifetime = write_file("life_time", "0x05 0x00")
        eol = write_file("pre_eol_info", "01")
        info = read_emmc_wear(lifetime, eol)
        assert info == WearInformation(40, None, PreEolInfo.NORMAL)

    def test_read_missing_file_returns_none(self, tmp_path, write_file):
        lifetime = write_file("life_time", "0x05 0x00")
        assert read_emmc_wear(lifetime, tmp_path / "missing") is None

    def test_read_malformed_returns_none(self, write_file):
        lifetime = write_file("life_time", "0x05 0x00")
        eol = write_file("pre_eol_info", "07")
        assert read_emmc_wear(lifetime, eol) is None


class TestUfsWear:
    def test_descriptor_dump(self):
        info = parse_ufs_wear(UFS_DUMP)
        assert info.lifetime_estimate_b == 90
        assert info.lifetime_estimate_a is None
        assert info.pre_eol_info == PreEolInfo.WARNING

    def test_no_recognized_fields_is_all_unknown(self):
        info = parse_ufs_wear("ufs version: 1.0\nVendorPropInfo = 0x7\n")
        assert info == WearInformation()

    def test_out_of_range_field_left_unknown(self):
        info = parse_ufs_wear(
            "bPreEOLInfo = 0x9\nbDeviceLifeTimeEstA = 0x3\nbDeviceLifeTimeEstB = 0x20\n"
        )
        assert info == WearInformation(20, None, PreEolInfo.UNKNOWN)

    def test_read_from_file(self, write_file):
        path = write_file("health", UFS_DUMP)
        assert read_ufs_wear(path) == WearInformation(None, 90, PreEolInfo.WARNING)

    def test_read_missing_file_returns_none(self, tmp_path):
        assert read_ufs_wear(tmp_path / "missing") is None
