import pytest

from config.settings import Settings
from src.rb_common.errors import InvalidAmountError
from src.rb_common.units import amount_to_display, validate_u64
from src.rb_math.fixed_point import U64_MAX


class TestValidateU64:
    def test_bounds(self) -> None:
        assert validate_u64("q", 0) == 0
        assert validate_u64("q", U64_MAX) == U64_MAX

    @pytest.mark.parametrize("value", [-1, U64_MAX + 1, 1.0, "5", None, True])
    def test_rejected(self, value: object) -> None:
        with pytest.raises(InvalidAmountError) as exc_info:
            validate_u64("q", value)
        assert exc_info.value.code == 1007


class TestAmountToDisplay:
    def test_six_decimals(self) -> None:
        assert amount_to_display(1_500_000) == "1.500000"
        assert amount_to_display(1_234_567_890_123) == "1,234,567.890123"
        assert amount_to_display(7) == "0.000007"

    def test_negative(self) -> None:
        assert amount_to_display(-2_500_000) == "-2.500000"

    def test_no_decimals(self) -> None:
        assert amount_to_display(1_000_000, decimals=0) == "1,000,000"


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("DATABASE_URL", "LOG_LEVEL", "COLLATERAL_DECIMALS", "DEBUG"):
            monkeypatch.delenv(key, raising=False)
        s = Settings(_env_file=None)
        assert s.DATABASE_URL == "sqlite:///./range_bet.db"
        assert s.LOG_LEVEL == "INFO"
        assert s.COLLATERAL_DECIMALS == 6
        assert s.DEBUG is False

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("COLLATERAL_DECIMALS", "9")
        s = Settings(_env_file=None)
        assert s.LOG_LEVEL == "DEBUG"
        assert s.COLLATERAL_DECIMALS == 9
