"""Tests for the makerTraits bitfield codec."""

import pytest

from options_orderbook.constants import (
    ALLOW_MULTIPLE_FILLS_FLAG,
    EXPIRATION_MASK,
    HAS_EXTENSION_FLAG,
)
from options_orderbook.errors import InvalidExpirationError, InvalidOrderError
from options_orderbook.traits import (
    allows_partial_fill,
    get_expiration,
    has_extension_flag,
    is_active,
    set_expiration,
    set_flag,
    validate_traits,
)


class TestFlags:
    """Tests for single-bit flags."""

    def test_set_and_clear_flag(self):
        traits = set_flag(0, ALLOW_MULTIPLE_FILLS_FLAG, True)
        assert traits == 1
        assert allows_partial_fill(traits)

        assert set_flag(traits, ALLOW_MULTIPLE_FILLS_FLAG, False) == 0

    def test_has_extension_is_bit_255(self):
        traits = set_flag(0, HAS_EXTENSION_FLAG, True)

        assert traits == 1 << 255
        assert has_extension_flag(traits)
        assert not allows_partial_fill(traits)

    def test_set_flag_rejects_out_of_range_bit(self):
        with pytest.raises(ValueError):
            set_flag(0, 256, True)


class TestExpiration:
    """Tests for the 40-bit expiration field at offset 210."""

    def test_round_trip(self):
        ts = 1_700_003_600
        traits = set_expiration(0, ts)

        assert get_expiration(traits) == ts
        assert traits == ts << 210

    def test_max_40_bit_value(self):
        assert get_expiration(set_expiration(0, EXPIRATION_MASK)) == EXPIRATION_MASK

    def test_rejects_timestamp_wider_than_40_bits(self):
        """Out-of-range timestamps are rejected, never truncated."""
        with pytest.raises(InvalidExpirationError):
            set_expiration(0, EXPIRATION_MASK + 1)

    def test_rejects_negative_timestamp(self):
        with pytest.raises(InvalidExpirationError):
            set_expiration(0, -1)

    def test_overwrites_previous_expiration_and_keeps_flags(self):
        traits = set_flag(set_flag(0, HAS_EXTENSION_FLAG, True), 0, True)
        traits = set_expiration(traits, 123)
        traits = set_expiration(traits, 456)

        assert get_expiration(traits) == 456
        assert has_extension_flag(traits)
        assert allows_partial_fill(traits)

    def test_get_expiration_rejects_non_uint256(self):
        with pytest.raises(ValueError):
            get_expiration(-1)
        with pytest.raises(ValueError):
            get_expiration("123")

    def test_is_active_boundaries(self):
        now = 1_700_000_000

        assert is_active(0, now), "Zero expiration never expires"
        assert is_active(set_expiration(0, now + 1), now)
        assert not is_active(set_expiration(0, now), now)
        assert not is_active(set_expiration(0, now - 1), now)


class TestValidateTraits:
    """Tests for reserved-bit validation."""

    def test_accepts_known_bits(self):
        traits = set_expiration(set_flag(set_flag(0, 255, True), 0, True), 1_800_000_000)

        assert validate_traits(traits) == traits

    @pytest.mark.parametrize("bit", [1, 100, 209, 250, 254])
    def test_rejects_reserved_bits(self, bit):
        with pytest.raises(InvalidOrderError):
            validate_traits(1 << bit)

    def test_rejects_out_of_range(self):
        with pytest.raises(InvalidOrderError):
            validate_traits(1 << 256)
