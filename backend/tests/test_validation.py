"""
Field validation tests.

Verifies:
- Each bounded field fails with its own error code
- Checks run in a fixed order (first failure wins)
- Limits are inclusive
"""

import pytest

from conftest import HASH_A, event_input, product_input
from provenance.errors import ErrorCode, ValidationError
from provenance.validation import (
    MAX_CUSTOM_FIELDS,
    MAX_DESCRIPTION_LEN,
    MAX_ID_LEN,
    MAX_TAGS,
    max_count,
    max_len,
    non_empty,
    validate_event_input,
    validate_pagination,
    validate_product_input,
)


def _code(fn, inp) -> ErrorCode:
    with pytest.raises(ValidationError) as exc_info:
        fn(inp)
    return exc_info.value.code


class TestPrimitives:

    def test_non_empty(self):
        assert non_empty("a")
        assert not non_empty("")
        assert not non_empty(None)

    def test_max_len_inclusive(self):
        assert max_len("abc", 3)
        assert not max_len("abcd", 3)

    def test_max_count(self):
        assert max_count([1, 2], 2)
        assert not max_count([1, 2, 3], 2)


# =============================================================================
# PRODUCT INPUT
# =============================================================================


class TestProductValidation:

    def test_valid_input_passes(self):
        validate_product_input(product_input(tags=["organic"], custom={"grade": "AA"}))

    @pytest.mark.parametrize(
        "overrides,code",
        [
            ({"id": ""}, ErrorCode.INVALID_PRODUCT_ID),
            ({"id": "x" * (MAX_ID_LEN + 1)}, ErrorCode.PRODUCT_ID_TOO_LONG),
            ({"name": ""}, ErrorCode.INVALID_PRODUCT_NAME),
            ({"name": "n" * 129}, ErrorCode.PRODUCT_NAME_TOO_LONG),
            ({"origin": ""}, ErrorCode.INVALID_ORIGIN),
            ({"origin": "o" * 257}, ErrorCode.ORIGIN_TOO_LONG),
            ({"category": ""}, ErrorCode.INVALID_CATEGORY),
            ({"category": "c" * 65}, ErrorCode.CATEGORY_TOO_LONG),
            ({"description": "d" * (MAX_DESCRIPTION_LEN + 1)}, ErrorCode.DESCRIPTION_TOO_LONG),
            ({"tags": ["t"] * (MAX_TAGS + 1)}, ErrorCode.TOO_MANY_TAGS),
            ({"tags": ["t" * 65]}, ErrorCode.TAG_TOO_LONG),
            ({"certifications": [HASH_A] * 51}, ErrorCode.TOO_MANY_CERTIFICATIONS),
            ({"certifications": [b"short"]}, ErrorCode.INVALID_HASH),
            ({"media_hashes": [HASH_A] * 51}, ErrorCode.TOO_MANY_MEDIA_HASHES),
            ({"custom": {f"k{i}": "v" for i in range(MAX_CUSTOM_FIELDS + 1)}}, ErrorCode.TOO_MANY_CUSTOM_FIELDS),
            ({"custom": {"bad key": "v"}}, ErrorCode.INVALID_CUSTOM_FIELD_KEY),
            ({"custom": {"grade": "v" * 513}}, ErrorCode.CUSTOM_FIELD_VALUE_TOO_LONG),
            ({"tags": "organic"}, ErrorCode.INVALID_PAYLOAD),
            ({"tags": [7]}, ErrorCode.INVALID_PAYLOAD),
            ({"media_hashes": HASH_A}, ErrorCode.INVALID_PAYLOAD),
            ({"custom": ["grade"]}, ErrorCode.INVALID_PAYLOAD),
            ({"custom": {"grade": 5}}, ErrorCode.INVALID_PAYLOAD),
        ],
    )
    def test_field_error_codes(self, overrides, code):
        assert _code(validate_product_input, product_input(**overrides)) == code

    def test_boundary_lengths_accepted(self):
        validate_product_input(product_input(
            product_id="x" * MAX_ID_LEN,
            description="d" * MAX_DESCRIPTION_LEN,
            tags=["t" * 64] * MAX_TAGS,
        ))

    def test_first_failing_check_wins(self):
        inp = product_input(product_id="", name="", origin="", category="")
        assert _code(validate_product_input, inp) == ErrorCode.INVALID_PRODUCT_ID

        inp = product_input(name="", tags=["t"] * 50)
        assert _code(validate_product_input, inp) == ErrorCode.INVALID_PRODUCT_NAME

    def test_empty_description_allowed(self):
        validate_product_input(product_input(description=""))


# =============================================================================
# EVENT INPUT
# =============================================================================


class TestEventValidation:

    def test_valid_event_passes(self):
        validate_event_input(event_input(location="Farm", note="ok", metadata={"temperature_c": "22.5"}))

    @pytest.mark.parametrize(
        "overrides,code",
        [
            ({"event_type": ""}, ErrorCode.INVALID_EVENT_TYPE),
            ({"event_type": "not valid"}, ErrorCode.INVALID_EVENT_TYPE),
            ({"event_type": "E" * 33}, ErrorCode.EVENT_TYPE_TOO_LONG),
            ({"location": "l" * 257}, ErrorCode.LOCATION_TOO_LONG),
            ({"data_hash": b"\x00" * 31}, ErrorCode.INVALID_HASH),
            ({"note": "n" * 1025}, ErrorCode.NOTE_TOO_LONG),
            ({"metadata": {"k": "v" * 513}}, ErrorCode.CUSTOM_FIELD_VALUE_TOO_LONG),
            ({"metadata": "k=v"}, ErrorCode.INVALID_PAYLOAD),
        ],
    )
    def test_event_error_codes(self, overrides, code):
        assert _code(validate_event_input, event_input(**overrides)) == code


class TestPaginationValidation:

    def test_zero_is_valid(self):
        validate_pagination(0, 0)

    @pytest.mark.parametrize("offset,limit", [(-1, 10), (0, -1), ("0", 10), (True, 10)])
    def test_rejects_bad_values(self, offset, limit):
        with pytest.raises(ValidationError) as exc_info:
            validate_pagination(offset, limit)
        assert exc_info.value.code == ErrorCode.INVALID_PAGINATION
