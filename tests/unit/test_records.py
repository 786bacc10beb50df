"""
Allocation Record Unit Tests
Tests for core/merkle/records.py

Tests:
- parse_uint accepts ints and decimal strings only
- range limits (uint256 index, uint128 amount)
- address normalization on construction
- dict round trip with decimal-string numbers
"""
import pytest

from core.crypto.addresses import normalize_address
from core.merkle.records import (
    UINT128_MAX,
    UINT256_MAX,
    AllocationRecord,
    parse_uint,
)
from core.schemas.errors import ErrorCodes, MalformedInputException

from fixtures.allocations import ADDR_A


class TestParseUint:
    """Tests for parse_uint()."""

    def test_int_passthrough(self):
        assert parse_uint(42, "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT) == 42

    def test_decimal_string(self):
        assert parse_uint(" 1000 ", "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT) == 1000

    def test_large_string_is_exact(self):
        value = str(2**100 + 1)
        assert parse_uint(value, "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT) == 2**100 + 1

    @pytest.mark.parametrize("value", [1.0, True, "1e18", "0x10", "-5", "", "12.5", None])
    def test_rejects_non_integers(self, value):
        with pytest.raises(MalformedInputException) as exc_info:
            parse_uint(value, "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT)
        assert exc_info.value.code == ErrorCodes.INVALID_AMOUNT

    def test_rejects_negative_int(self):
        with pytest.raises(MalformedInputException, match="non-negative"):
            parse_uint(-1, "index", UINT256_MAX, ErrorCodes.INVALID_INDEX)

    def test_upper_bound_inclusive(self):
        assert parse_uint(UINT128_MAX, "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT) == UINT128_MAX
        with pytest.raises(MalformedInputException, match="exceeds"):
            parse_uint(UINT128_MAX + 1, "amount", UINT128_MAX, ErrorCodes.INVALID_AMOUNT)


class TestAllocationRecord:
    """Tests for AllocationRecord."""

    def test_create_normalizes_address(self):
        record = AllocationRecord.create("7", "0x" + "AA" * 20, "1000")
        assert record.index == 7
        assert record.amount == 1000
        assert record.recipient == normalize_address(ADDR_A)
        assert record.key == ADDR_A

    def test_constructor_rejects_strings(self):
        with pytest.raises(MalformedInputException, match="create"):
            AllocationRecord(index="1", recipient=ADDR_A, amount=10)

    def test_amount_limited_to_uint128(self):
        with pytest.raises(MalformedInputException) as exc_info:
            AllocationRecord.create(0, ADDR_A, 2**128)
        assert exc_info.value.code == ErrorCodes.INVALID_AMOUNT

    def test_index_allows_uint256(self):
        record = AllocationRecord.create(UINT256_MAX, ADDR_A, 1)
        assert record.index == UINT256_MAX

    def test_invalid_address(self):
        with pytest.raises(MalformedInputException) as exc_info:
            AllocationRecord.create(0, "0xnot-an-address", 1)
        assert exc_info.value.code == ErrorCodes.INVALID_ADDRESS

    def test_zero_amount_is_a_valid_record(self):
        # Zero amounts are rejected at tree level, not record level
        assert AllocationRecord.create(0, ADDR_A, 0).amount == 0

    def test_frozen(self):
        record = AllocationRecord.create(0, ADDR_A, 1)
        with pytest.raises(Exception):
            record.amount = 5

    def test_dict_round_trip(self):
        record = AllocationRecord.create(3, ADDR_A, 2**100)
        data = record.to_dict()
        assert data == {"index": "3", "recipient": record.recipient, "amount": str(2**100)}
        assert AllocationRecord.from_dict(data) == record

    def test_equal_regardless_of_input_case(self):
        assert AllocationRecord.create(0, ADDR_A, 1) == AllocationRecord.create(0, "0x" + "AA" * 20, 1)
