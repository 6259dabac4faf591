"""Tests for MarketService: registry, lifecycle, sequential close, withdrawal."""

import pytest

from src.main import App, build_app
from src.rb_clearing.infrastructure.custody import InMemoryCustody
from src.rb_common.errors import AppError
from src.rb_market.application.service import MarketService
from src.rb_market.infrastructure.memory import InMemoryLedgerRepository


def _create(app: App, caller: str = "admin") -> int:
    return app.markets.create_market(caller, 60, -360, 360, close_ts=2_000_000_000).id


class TestInitializeProgram:
    def test_initialize(self) -> None:
        app = build_app()
        state = app.markets.initialize_program("admin")
        assert state.owner == "admin"
        assert state.market_count == 0
        assert state.last_closed_market == -1

    def test_twice_rejected(self, app: App) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.initialize_program("other")
        assert exc_info.value.code == 2007
        assert app.markets.get_program_state().owner == "admin"

    def test_create_before_initialize(self) -> None:
        app = build_app()
        with pytest.raises(AppError) as exc_info:
            _create(app)
        assert exc_info.value.code == 2006


class TestCreateMarket:
    def test_ids_are_sequential(self, app: App) -> None:
        assert [_create(app) for _ in range(3)] == [0, 1, 2]
        assert app.markets.get_program_state().market_count == 3

    def test_new_market_is_open_active_and_empty(self, app: App) -> None:
        m = app.markets.create_market("admin", 60, -360, 360, close_ts=2_000_000_000)
        assert m.status == "OPEN_ACTIVE"
        assert m.min_bin_index == -6
        assert m.max_bin_index == 6
        assert len(m.bins) == 13
        assert all(b.quantity == 0 for b in m.bins)
        assert m.total_supply == 0
        assert m.collateral_balance == 0
        assert m.close_ts == 2_000_000_000
        assert m.open_ts > 0

    def test_clock_sets_open_ts(self, custody: InMemoryCustody) -> None:
        markets = MarketService(InMemoryLedgerRepository(), custody, clock=lambda: 1_234)
        markets.initialize_program("admin")
        assert markets.create_market("admin", 1, 0, 4, close_ts=5_000).open_ts == 1_234

    def test_owner_only(self, app: App) -> None:
        with pytest.raises(AppError) as exc_info:
            _create(app, caller="mallory")
        assert exc_info.value.code == 3001
        assert app.markets.get_program_state().market_count == 0

    def test_invalid_ticks_leave_count_unchanged(self, app: App) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.create_market("admin", 60, -350, 360, close_ts=0)
        assert exc_info.value.code == 1002
        assert app.markets.get_program_state().market_count == 0

    def test_oversized_tick_range_rejected(self, app: App) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.create_market("admin", 1, -(10**12), 10**12, close_ts=0)
        assert exc_info.value.code == 1012
        assert app.markets.get_program_state().market_count == 0

    def test_get_missing_market(self, app: App) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.get_market(42)
        assert exc_info.value.code == 1010


class TestActivateMarket:
    def test_toggle(self, app: App, market_id: int) -> None:
        assert app.markets.activate_market("admin", market_id, False).status == "OPEN_INACTIVE"
        assert app.markets.activate_market("admin", market_id, True).status == "OPEN_ACTIVE"

    def test_idempotent(self, app: App, market_id: int) -> None:
        app.markets.activate_market("admin", market_id, True)
        assert app.markets.activate_market("admin", market_id, True).active is True

    def test_owner_only(self, app: App, market_id: int) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.activate_market("mallory", market_id, False)
        assert exc_info.value.code == 3001

    def test_closed_market_cannot_toggle(self, app: App, market_id: int) -> None:
        app.markets.close_market("admin", market_id, 0)
        with pytest.raises(AppError) as exc_info:
            app.markets.activate_market("admin", market_id, True)
        assert exc_info.value.code == 2002


class TestCloseMarket:
    def test_close_sets_winner(self, app: App, market_id: int) -> None:
        m = app.markets.close_market("admin", market_id, -2)
        assert m.closed is True
        assert m.winning_bin == -2
        assert m.status == "CLOSED"
        assert app.markets.get_program_state().last_closed_market == market_id

    def test_sequential_order(self, app: App) -> None:
        ids = [_create(app) for _ in range(3)]

        with pytest.raises(AppError) as exc_info:
            app.markets.close_market("admin", ids[1], 0)
        assert exc_info.value.code == 2004

        app.markets.close_market("admin", ids[0], 0)
        with pytest.raises(AppError) as exc_info:
            app.markets.close_market("admin", ids[0], 0)
        assert exc_info.value.code == 2004

        app.markets.close_market("admin", ids[1], 0)
        app.markets.close_market("admin", ids[2], 0)
        assert app.markets.get_program_state().last_closed_market == 2

    def test_next_market_flagged_closed(self, app: App) -> None:
        _create(app)
        _create(app)
        app.markets.close_market("admin", 0, 0)
        # registry and record disagree: market 1 already flagged closed
        m = app.repo.get_market(1)
        m.closed = True
        m.winning_bin = 0
        app.repo.save_market(m)

        with pytest.raises(AppError) as exc_info:
            app.markets.close_market("admin", 1, 0)
        assert exc_info.value.code == 2003

    def test_winning_bin_out_of_range(self, app: App, market_id: int) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.close_market("admin", market_id, 7)
        assert exc_info.value.code == 1004
        assert app.markets.get_market(market_id).closed is False
        assert app.markets.get_program_state().last_closed_market == -1

    def test_missing_market(self, app: App) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.close_market("admin", 0, 0)
        assert exc_info.value.code == 1010

    def test_owner_only(self, app: App, market_id: int) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.close_market("mallory", market_id, 0)
        assert exc_info.value.code == 3001

    def test_inactive_market_can_close(self, app: App, market_id: int) -> None:
        app.markets.activate_market("admin", market_id, False)
        assert app.markets.close_market("admin", market_id, 1).closed is True


class TestWithdrawCollateral:
    def test_withdraw_after_close(
        self, app: App, market_id: int, custody: InMemoryCustody
    ) -> None:
        app.trading.buy_tokens(market_id, "alice", [0], [1_000_000], 1_000_000)
        app.markets.close_market("admin", market_id, 3)

        resp = app.markets.withdraw_collateral("admin", market_id)
        assert resp.amount == 1_000_000
        assert resp.amount_display == "1.000000"
        assert custody.wallets["admin"] == 1_000_000
        assert custody.vaults[market_id] == 0
        assert app.markets.get_market(market_id).collateral_balance == 0

    def test_open_market_rejected(self, app: App, market_id: int) -> None:
        with pytest.raises(AppError) as exc_info:
            app.markets.withdraw_collateral("admin", market_id)
        assert exc_info.value.code == 2005

    def test_nothing_to_withdraw(self, app: App, market_id: int) -> None:
        app.markets.close_market("admin", market_id, 0)
        with pytest.raises(AppError) as exc_info:
            app.markets.withdraw_collateral("admin", market_id)
        assert exc_info.value.code == 4005

    def test_second_withdraw_rejected(self, app: App, market_id: int) -> None:
        app.trading.buy_tokens(market_id, "alice", [0], [500], 500)
        app.markets.close_market("admin", market_id, 0)
        app.markets.withdraw_collateral("admin", market_id)
        with pytest.raises(AppError) as exc_info:
            app.markets.withdraw_collateral("admin", market_id)
        assert exc_info.value.code == 4005

    def test_owner_only(self, app: App, market_id: int) -> None:
        app.markets.close_market("admin", market_id, 0)
        with pytest.raises(AppError) as exc_info:
            app.markets.withdraw_collateral("mallory", market_id)
        assert exc_info.value.code == 3001
