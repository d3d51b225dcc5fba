"""
Tests for the field-specific grammars: Version, Status, Conffiles lines and
the numeric fields, plus the status enumerations they map into.
"""

import pytest

from package_managers.opkg.parser import (
    MAX_CONFFILE_MD5SUM,
    MAX_CONFFILE_PATH,
    parse_conffile,
    parse_number,
    parse_status,
    parse_version,
)
from package_managers.opkg.structs import (
    Conffile,
    Field,
    Package,
    StateFlag,
    StateStatus,
    StateWant,
)


class TestParseVersion:
    @pytest.mark.parametrize(
        "value,epoch,version,revision",
        [
            ("2:1.4.5-3", 2, "1.4.5", "3"),
            ("1.0", None, "1.0", None),
            ("0:1.0-", 0, "1.0", ""),
            ("1.0-2-3", None, "1.0-2", "3"),
            ("Version: 1:2022.83-r0", 1, "2022.83", "r0"),
            ("   2023c-r0", None, "2023c", "r0"),
        ],
    )
    def test_decompose(self, mock_logger, value, epoch, version, revision):
        pkg = Package()
        parse_version(pkg, value, mock_logger)
        assert pkg.epoch == epoch
        assert pkg.version == version
        assert pkg.revision == revision
        mock_logger.error.assert_not_called()

    def test_invalid_epoch_defaults_to_zero(self, mock_logger):
        pkg = Package(name="foo")
        parse_version(pkg, "x1:1.0-1", mock_logger)
        assert pkg.epoch == 0
        assert pkg.version == "1.0"
        assert pkg.revision == "1"
        mock_logger.error.assert_called_once()

    def test_empty_epoch_is_invalid(self, mock_logger):
        pkg = Package()
        parse_version(pkg, ":1.0", mock_logger)
        assert pkg.epoch == 0
        assert pkg.version == "1.0"
        mock_logger.error.assert_called_once()

    def test_full_version_round_trip(self, mock_logger):
        pkg = Package()
        parse_version(pkg, "3:4.2-r7", mock_logger)
        assert pkg.full_version() == "3:4.2-r7"

        pkg = Package()
        assert pkg.full_version() is None


class TestParseStatus:
    def test_three_tokens(self, mock_logger):
        pkg = Package()
        parse_status(pkg, "Status: install ok installed", mock_logger)
        assert pkg.state_want is StateWant.INSTALL
        assert pkg.state_flag == StateFlag.OK
        assert pkg.state_status is StateStatus.INSTALLED
        mock_logger.error.assert_not_called()

    def test_without_label(self, mock_logger):
        pkg = Package()
        parse_status(pkg, " purge reinstreq half-installed", mock_logger)
        assert pkg.state_want is StateWant.PURGE
        assert pkg.state_flag == StateFlag.REINSTREQ
        assert pkg.state_status is StateStatus.HALF_INSTALLED

    def test_too_few_tokens_changes_nothing(self, mock_logger):
        pkg = Package(state_want=StateWant.INSTALL)
        parse_status(pkg, "Status: bogus", mock_logger)
        assert pkg.state_want is StateWant.INSTALL
        assert pkg.state_flag == StateFlag.OK
        assert pkg.state_status is StateStatus.NOT_INSTALLED
        mock_logger.error.assert_called_once()

    def test_unknown_tokens_fall_back(self, mock_logger):
        pkg = Package()
        parse_status(pkg, "frobnicate sparkly weird", mock_logger)
        assert pkg.state_want is StateWant.UNKNOWN
        assert pkg.state_flag == StateFlag.OK
        assert pkg.state_status is StateStatus.NOT_INSTALLED
        mock_logger.error.assert_not_called()
        mock_logger.debug.assert_called_once()


class TestStateEnums:
    def test_combined_flags(self):
        flag = StateFlag.from_str("hold,user")
        assert flag == StateFlag.HOLD | StateFlag.USER
        assert str(flag) == "hold,user"

    def test_flag_ignores_unknown_parts(self):
        assert StateFlag.from_str("hold,bogus") == StateFlag.HOLD
        assert str(StateFlag.from_str("ok")) == "ok"

    def test_flag_names_are_case_sensitive(self):
        assert StateFlag.from_str("HOLD") == StateFlag.OK
        assert StateFlag.from_str("Hold,user") == StateFlag.USER

    def test_uppercase_flag_in_status_line(self, mock_logger):
        pkg = Package()
        parse_status(pkg, "Status: install HOLD installed", mock_logger)
        assert pkg.state_flag == StateFlag.OK
        assert pkg.state_status is StateStatus.INSTALLED

    def test_literal_forms(self):
        assert str(StateWant.DEINSTALL) == "deinstall"
        assert str(StateStatus.POST_INST_FAILED) == "post-inst-failed"
        assert StateStatus.from_str("config-files") is StateStatus.CONFIG_FILES

    def test_field_keywords(self):
        assert Field.from_keyword("Pre-Depends") is Field.PRE_DEPENDS
        assert Field.from_keyword("MD5Sum") is Field.MD5SUM
        assert Field.from_keyword("Homepage") is None


class TestParseConffile:
    def test_path_and_checksum(self, mock_logger):
        pkg = Package()
        parse_conffile(pkg, " /etc/foo.conf d41d8cd98f00b204e9800998ecf8427e", mock_logger)
        assert pkg.conffiles == [
            Conffile("/etc/foo.conf", "d41d8cd98f00b204e9800998ecf8427e")
        ]

    def test_missing_checksum(self, mock_logger):
        pkg = Package()
        parse_conffile(pkg, " /etc/foo.conf", mock_logger)
        assert pkg.conffiles == []
        mock_logger.error.assert_called_once()

    def test_long_tokens_are_truncated(self, mock_logger):
        pkg = Package()
        path = "/" + "a" * 2000
        md5sum = "f" * 100
        parse_conffile(pkg, f" {path} {md5sum}", mock_logger)

        conffile = pkg.conffiles[0]
        assert len(conffile.path) == MAX_CONFFILE_PATH
        assert len(conffile.md5sum) == MAX_CONFFILE_MD5SUM
        assert path.startswith(conffile.path)


class TestParseNumber:
    @pytest.mark.parametrize(
        "value,expected,warned",
        [
            ("42", 42, False),
            (" 42", 42, False),
            ("42 kB", 42, True),
            ("abc", 0, True),
            ("", 0, True),
        ],
    )
    def test_best_effort(self, mock_logger, value, expected, warned):
        assert parse_number(Package(), Field.SIZE, value, mock_logger) == expected
        assert mock_logger.warn.called is warned
