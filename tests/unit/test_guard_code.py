"""Unit tests for steamguard.services.guard_code."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from steamguard.models.guard import GuardCode
from steamguard.services.guard_code import CODE_ALPHABET, current_code, generate_code
from steamguard.utils.errors import MissingSecretError

_ZERO = "AAAAAAAAAAAAAAAAAAAAAAAAAAA="
_HEX = "0123456789abcdef0123456789abcdef01234567"
_HEX_AS_BASE64 = "ASNFZ4mrze8BI0VniavN7wEjRWc="


class TestGenerateCode:
    @pytest.mark.parametrize(
        ("timestamp", "expected"),
        [
            (0, "RYH4D"),
            (1_700_000_000, "THTN4"),
            (1_700_000_029, "NVRD8"),
            (1_700_000_030, "NVRD8"),
            (1_234_567_890, "76TJG"),
        ],
    )
    def test_known_codes_for_zero_key(self, timestamp: int, expected: str) -> None:
        assert generate_code(_ZERO, timestamp) == expected

    def test_same_window_gives_same_code(self) -> None:
        # 1_700_000_010 // 30 == 1_700_000_029 // 30
        assert generate_code(_ZERO, 1_700_000_010) == generate_code(_ZERO, 1_700_000_029)

    def test_adjacent_windows_differ(self) -> None:
        assert generate_code(_ZERO, 1_699_999_999) != generate_code(_ZERO, 1_700_000_010)

    def test_code_shape(self) -> None:
        for ts in range(1_700_000_000, 1_700_003_000, 30):
            code = generate_code(_ZERO, ts)
            assert len(code) == 5
            assert set(code) <= set(CODE_ALPHABET)

    def test_hex_and_base64_secrets_give_same_code(self) -> None:
        assert generate_code(_HEX, 1_700_000_000) == "MM94N"
        assert generate_code(_HEX_AS_BASE64, 1_700_000_000) == "MM94N"

    def test_accepts_raw_key_bytes(self) -> None:
        assert generate_code(bytes(20), 0) == "RYH4D"

    @pytest.mark.parametrize("secret", [None, "", "A"])
    def test_unusable_secret_raises_missing_secret(self, secret) -> None:
        with pytest.raises(MissingSecretError):
            generate_code(secret, 1_700_000_000)


class TestCurrentCode:
    def _clock(self, now: int) -> MagicMock:
        clock = MagicMock()
        clock.current_time.return_value = now
        return clock

    def test_uses_synchronized_time(self) -> None:
        result = current_code(_ZERO, self._clock(1_700_000_000))
        assert isinstance(result, GuardCode)
        assert result.code == "THTN4"

    def test_remaining_validity_at_window_start(self) -> None:
        # 1_700_000_010 is the first second of its window.
        assert current_code(_ZERO, self._clock(1_700_000_010)).valid_for_seconds == 30

    def test_remaining_validity_at_window_end(self) -> None:
        assert current_code(_ZERO, self._clock(1_700_000_039)).valid_for_seconds == 1
