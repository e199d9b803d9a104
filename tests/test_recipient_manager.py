"""
Tests for sol_flight/recipient_manager.py
"""

import pytest

from sol_flight.models import ConfigurationError
from sol_flight.recipient_manager import RecipientManager


class TestFromCsv:

    def test_trims_and_skips_blank_cells(self, tmp_path):
        csv_file = tmp_path / "recipients.csv"
        csv_file.write_text("address\n  addrA  \n\n   \naddrB\n\naddrC\n")

        assert RecipientManager.from_csv(str(csv_file)) == ["addrA", "addrB", "addrC"]

    def test_keeps_values_that_look_like_numbers_or_na(self, tmp_path):
        csv_file = tmp_path / "recipients.csv"
        csv_file.write_text("address\n11111111111111111111111111111111\nNA\n")

        assert RecipientManager.from_csv(str(csv_file)) == ["11111111111111111111111111111111", "NA"]

    def test_extra_columns_are_ignored(self, tmp_path):
        csv_file = tmp_path / "recipients.csv"
        csv_file.write_text("name, address\nalice,addrA\nbob,\"addrB\"\n")

        assert RecipientManager.from_csv(str(csv_file)) == ["addrA", "addrB"]

    def test_header_only(self, tmp_path):
        csv_file = tmp_path / "recipients.csv"
        csv_file.write_text("address\n")

        assert RecipientManager.from_csv(str(csv_file)) == []

    def test_missing_address_column(self, tmp_path):
        csv_file = tmp_path / "recipients.csv"
        csv_file.write_text("wallet\naddrA\n")

        with pytest.raises(ConfigurationError, match="address"):
            RecipientManager.from_csv(str(csv_file))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            RecipientManager.from_csv(str(tmp_path / "nope.csv"))

    def test_empty_file(self, tmp_path):
        csv_file = tmp_path / "recipients.csv"
        csv_file.write_text("")

        with pytest.raises(ConfigurationError, match="empty"):
            RecipientManager.from_csv(str(csv_file))
