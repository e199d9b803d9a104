"""
Tests for sol_flight/address_validator.py
"""

import pytest
from solders.keypair import Keypair

from sol_flight.address_validator import find_invalid_addresses, is_valid_address
from sol_flight.models import InvalidAddress

SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class TestIsValidAddress:

    def test_well_formed_addresses(self):
        assert is_valid_address(SYSTEM_PROGRAM)
        assert is_valid_address(TOKEN_PROGRAM)
        assert is_valid_address(str(Keypair().pubkey()))

    @pytest.mark.parametrize("address", [
        "",
        "   ",
        "not-an-address",
        TOKEN_PROGRAM[:-4],                 # too short
        TOKEN_PROGRAM + "abc",              # too long
        "0OIl" + TOKEN_PROGRAM[4:],         # characters outside base58
        "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
    ])
    def test_malformed_addresses(self, address):
        assert is_valid_address(address) is False

    @pytest.mark.parametrize("value", [None, 123, b"abc"])
    def test_non_strings_are_invalid(self, value):
        assert is_valid_address(value) is False


class TestFindInvalidAddresses:

    def test_reports_every_invalid_address_with_row(self):
        good = str(Keypair().pubkey())
        addresses = [good, "bad-one", good, "", "bad-two"]

        invalid = find_invalid_addresses(addresses)

        assert invalid == [
            InvalidAddress(row=3, address="bad-one"),
            InvalidAddress(row=5, address=""),
            InvalidAddress(row=6, address="bad-two"),
        ]

    def test_first_address_is_row_two(self):
        assert find_invalid_addresses(["nope"])[0].row == 2

    def test_header_offset_is_configurable(self):
        assert find_invalid_addresses(["nope"], header_rows=0)[0].row == 1

    def test_all_valid(self):
        assert find_invalid_addresses([str(Keypair().pubkey()) for _ in range(5)]) == []
