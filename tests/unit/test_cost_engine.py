"""Tests for the bonding-curve cost engine (rb_math.cost) and its bisection helper."""

import logging
import random

import pytest

from src.rb_common.errors import (
    AppError,
    ArrayLengthMismatchError,
    EmptyBinError,
    InsufficientBinBalanceError,
    InsufficientSupplyError,
    InvalidAmountError,
    InvalidBinStateError,
    MathOverflowError,
)
from src.rb_math.cost import (
    calculate_batch_buy_cost,
    calculate_batch_sell_cost,
    calculate_bin_buy_cost,
    calculate_bin_sell_cost,
    calculate_multi_bins_buy_cost,
    calculate_multi_bins_sell_cost,
    calculate_x_for_bin,
    calculate_x_for_multi_bins,
)
from src.rb_math.fixed_point import U64_MAX, checked_mul
from src.rb_math.root_finder import bisect_max_within

M = 1_000_000


class TestBisection:
    def test_square_root(self) -> None:
        assert bisect_max_within(lambda n: n * n, 100, lo=0, hi=1000) == 10

    def test_hi_affordable(self) -> None:
        assert bisect_max_within(lambda n: n, 10**9, lo=0, hi=50) == 50

    def test_empty_interval(self) -> None:
        assert bisect_max_within(lambda n: n, 0, lo=7, hi=7) == 7

    def test_overflow_counts_as_over_budget(self) -> None:
        result = bisect_max_within(lambda n: checked_mul(n, n), U64_MAX, lo=0, hi=1 << 40)
        assert result == (1 << 32) - 1

    def test_other_errors_propagate(self) -> None:
        def fn(n: int) -> int:
            raise InvalidAmountError("n", n)

        with pytest.raises(InvalidAmountError):
            bisect_max_within(fn, 10, lo=0, hi=100)

    def test_iteration_bound_never_overshoots(self) -> None:
        result = bisect_max_within(lambda n: n * n, 100, lo=0, hi=1000, max_iterations=2)
        assert result * result <= 100


class TestBinBuyCost:
    def test_zero_amount(self) -> None:
        assert calculate_bin_buy_cost(0, 5, 10) == 0

    def test_empty_market_costs_amount(self) -> None:
        assert calculate_bin_buy_cost(100 * 10**9, 0, 0) == 100 * 10**9

    def test_whole_supply_bin_costs_amount(self) -> None:
        assert calculate_bin_buy_cost(10, 100, 100) == 10

    def test_doubling_supply_from_empty_bin(self) -> None:
        # q - T * ln(2) = 1e6 - 693147.18..., rounded up
        assert calculate_bin_buy_cost(M, 0, M) == 306_853

    def test_cheaper_than_amount_when_bin_below_supply(self) -> None:
        for x, q, t in [(0, 50 * 10**9, 100 * 10**9), (3 * M, M, 10 * M), (M, 5 * M, 2 * M)]:
            assert 0 < calculate_bin_buy_cost(q, x, t) < q

    def test_invalid_bin_state(self) -> None:
        with pytest.raises(InvalidBinStateError) as exc_info:
            calculate_bin_buy_cost(1, 5, 4)
        assert exc_info.value.code == 1009

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(InvalidAmountError):
            calculate_bin_buy_cost(-1, 0, 0)

    def test_bool_amount_rejected(self) -> None:
        with pytest.raises(InvalidAmountError):
            calculate_bin_buy_cost(True, 0, 0)

    def test_supply_overflow(self) -> None:
        with pytest.raises(MathOverflowError):
            calculate_bin_buy_cost(1, 0, U64_MAX)


class TestBinSellCost:
    def test_zero_amount(self) -> None:
        assert calculate_bin_sell_cost(0, 0, 0) == 0

    def test_whole_supply_bin_returns_amount(self) -> None:
        assert calculate_bin_sell_cost(40, 100, 100) == 40

    def test_halving_supply(self) -> None:
        # q - (T - x) * ln(2) = 1e6 - 693147.18..., rounded down
        assert calculate_bin_sell_cost(M, M, 2 * M) == 306_852

    def test_revenue_below_amount(self) -> None:
        revenue = calculate_bin_sell_cost(100 * 10**9, 100 * 10**9, 150 * 10**9)
        assert 0 < revenue < 100 * 10**9

    def test_empty_bin(self) -> None:
        with pytest.raises(EmptyBinError) as exc_info:
            calculate_bin_sell_cost(1, 0, 10)
        assert exc_info.value.code == 4001

    def test_more_than_bin(self) -> None:
        with pytest.raises(InsufficientBinBalanceError) as exc_info:
            calculate_bin_sell_cost(11, 10, 20)
        assert exc_info.value.code == 4002

    def test_invalid_bin_state(self) -> None:
        with pytest.raises(InvalidBinStateError):
            calculate_bin_sell_cost(1, 10, 5)

    def test_round_trip_never_profits(self) -> None:
        for x, q, t in [(0, M, M), (2 * M, 3 * M, 7 * M), (123_456, 987_654, 5_555_555)]:
            cost = calculate_bin_buy_cost(q, x, t)
            revenue = calculate_bin_sell_cost(q, x + q, t + q)
            assert revenue <= cost

    def test_fresh_round_trip_is_exact(self) -> None:
        cost = calculate_bin_buy_cost(100 * 10**9, 0, 0)
        revenue = calculate_bin_sell_cost(100 * 10**9, 100 * 10**9, 100 * 10**9)
        assert cost == revenue == 100 * 10**9


class TestBatches:
    def test_threads_total_supply(self) -> None:
        expected = calculate_bin_buy_cost(M, 0, M) + calculate_bin_buy_cost(M, 0, 2 * M)
        assert calculate_batch_buy_cost([0, 0], [M, M], M) == expected

    def test_order_dependent(self) -> None:
        forward = calculate_batch_buy_cost([0, M], [M, M], M)
        backward = calculate_batch_buy_cost([M, 0], [M, M], M)
        assert forward == calculate_bin_buy_cost(M, 0, M) + calculate_bin_buy_cost(M, M, 2 * M)
        assert backward == M + calculate_bin_buy_cost(M, 0, 2 * M)
        assert forward != backward

    def test_zero_amounts_skipped(self) -> None:
        assert calculate_batch_buy_cost([0, 0], [0, M], M) == calculate_bin_buy_cost(M, 0, M)
        assert calculate_batch_sell_cost([M, M], [0, 0], 2 * M) == 0

    def test_sell_threads_total_supply(self) -> None:
        expected = calculate_bin_sell_cost(M, M, 3 * M) + calculate_bin_sell_cost(M, M, 2 * M)
        assert calculate_batch_sell_cost([M, M], [M, M], 3 * M) == expected

    def test_length_mismatch(self) -> None:
        with pytest.raises(ArrayLengthMismatchError) as exc_info:
            calculate_batch_buy_cost([0, 0], [1], 0)
        assert exc_info.value.code == 1005


class TestMultiBins:
    def test_buy_matches_uniform_batch(self) -> None:
        bins = [0, 2 * M, M]
        assert calculate_multi_bins_buy_cost(M, bins, 3 * M) == calculate_batch_buy_cost(
            bins, [M, M, M], 3 * M
        )

    def test_buy_from_empty_market(self) -> None:
        # first leg pays face value, second leg prices against T = M
        assert calculate_multi_bins_buy_cost(M, [0, 0], 0) == M + 306_853

    def test_empty_list(self) -> None:
        assert calculate_multi_bins_buy_cost(M, [], 0) == 0
        assert calculate_multi_bins_sell_cost(M, [], 0) == 0

    def test_sell_matches_uniform_batch(self) -> None:
        bins = [2 * M, M, 3 * M]
        assert calculate_multi_bins_sell_cost(M, bins, 6 * M) == calculate_batch_sell_cost(
            bins, [M, M, M], 6 * M
        )

    def test_sell_empty_bin(self) -> None:
        with pytest.raises(EmptyBinError):
            calculate_multi_bins_sell_cost(1, [5, 0], 5)

    def test_sell_more_than_bin(self) -> None:
        with pytest.raises(InsufficientBinBalanceError):
            calculate_multi_bins_sell_cost(6, [10, 5], 15)

    def test_sell_more_than_supply(self) -> None:
        with pytest.raises(InsufficientSupplyError) as exc_info:
            calculate_multi_bins_sell_cost(5, [5, 5], 8)
        assert exc_info.value.code == 4008


class TestInverse:
    def test_x_for_bin_is_largest_affordable(self) -> None:
        budget = 306_853
        q = calculate_x_for_bin(budget, 0, M)
        assert calculate_bin_buy_cost(q, 0, M) <= budget
        assert calculate_bin_buy_cost(q + 1, 0, M) > budget
        assert q >= M

    def test_x_for_bin_empty_market(self) -> None:
        assert calculate_x_for_bin(5 * M, 0, 0) == 5 * M

    def test_x_for_bin_whole_supply(self) -> None:
        assert calculate_x_for_bin(5 * M, 7, 7) == 5 * M

    def test_x_for_bin_zero_budget(self) -> None:
        assert calculate_x_for_bin(0, 0, M) == 0

    def test_x_for_bin_capped_by_supply_headroom(self) -> None:
        assert calculate_x_for_bin(100, 0, 0) == 100
        assert calculate_x_for_bin(U64_MAX, 10, 10) == U64_MAX - 10

    def test_x_for_multi_bins_is_largest_affordable(self) -> None:
        bins = [0, M, 0]
        budget = 500_000
        x = calculate_x_for_multi_bins(budget, bins, 2 * M)
        assert calculate_multi_bins_buy_cost(x, bins, 2 * M) <= budget
        assert calculate_multi_bins_buy_cost(x + 1, bins, 2 * M) > budget

    def test_x_for_multi_bins_empty(self) -> None:
        assert calculate_x_for_multi_bins(M, [], 0) == 0
        assert calculate_x_for_multi_bins(0, [0, 0], M) == 0

    def test_inverse_errors_are_app_errors(self) -> None:
        with pytest.raises(AppError):
            calculate_x_for_bin(-5, 0, 0)


def _inverse_samples(n: int, seed: int = 20240611) -> list[tuple[int, int, int]]:
    rng = random.Random(seed)
    samples = [
        (0, 1, 0),
        (0, M, 0),
        (M, M, M),              # x == T
        (0, 1, 10**18),
        (10**18 - 1, 10**18, 10**18),
        (0, 10**18, 10**18),
        (1, 1, 10**18),
    ]
    for _ in range(n):
        total = rng.choice([0, rng.randint(1, 10**6), rng.randint(1, 10**18)])
        x = rng.randint(0, total)
        q = rng.randint(1, 10**18)
        samples.append((x, q, total))
    return samples


class TestInverseRecoversAmount:
    @pytest.mark.parametrize(("x", "q", "total"), _inverse_samples(200))
    def test_cost_then_inverse(self, x: int, q: int, total: int) -> None:
        cost = calculate_bin_buy_cost(q, x, total)
        assert calculate_x_for_bin(cost, x, total) >= q

    def test_wide_interval_closes_without_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="src.rb_math.root_finder")
        assert calculate_x_for_bin(1, 0, 1) >= 1
        assert "iteration bound" not in caplog.text

    def test_exact_closure_on_last_halving(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="src.rb_math.root_finder")
        # width 4 closes to 1 after exactly two halvings
        assert bisect_max_within(lambda n: n, 1, lo=0, hi=4, max_iterations=2) == 1
        assert "iteration bound" not in caplog.text
