"""Tests for StableSwapPool.swap and get_dy."""

import pytest

from stableswap.errors import (
    IndexOutOfRange,
    InvalidAmount,
    NoLiquidity,
    SameTokenSwap,
    SlippageExceeded,
    TransferFailed,
)
from tests.helpers import BOB, CAROL, EURC, IDRX, USDC

# 1,000 USDC in raw units; worth 16,000,000 IDRX or ~914.285714 EURC
THOUSAND_USDC = 1_000_000_000
FAIR_EURC_OUT = 914_285_714


class TestSwapPricing:
    """Tests for swap output and fee."""

    def test_near_fair_rate(self, seeded_pool):
        result = seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)
        assert FAIR_EURC_OUT * 99 // 100 < result.amount_out < FAIR_EURC_OUT

    def test_quote_matches_execution(self, seeded_pool):
        quoted = seeded_pool.get_dy(USDC, EURC, THOUSAND_USDC)
        result = seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)
        assert result.amount_out == quoted

    def test_fee_charged_on_output(self, seeded_pool):
        result = seeded_pool.swap(BOB, USDC, IDRX, THOUSAND_USDC)
        gross = result.amount_out + result.fee
        assert result.fee == gross * 400 // 10**6

    def test_zero_fee_pool(self, feeless_pool):
        result = feeless_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)
        assert result.fee == 0

    def test_larger_swaps_slip_more(self, seeded_pool):
        small = seeded_pool.get_dy(USDC, EURC, THOUSAND_USDC)
        large = seeded_pool.get_dy(USDC, EURC, 5 * THOUSAND_USDC)
        assert large < 5 * small

    def test_round_trip_loses(self, seeded_pool):
        out = seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC).amount_out
        back = seeded_pool.swap(BOB, EURC, USDC, out).amount_out
        assert back < THOUSAND_USDC


class TestSwapSettlement:
    """Tests for balances and ledgers after a swap."""

    def test_pool_balances_move(self, seeded_pool):
        before = seeded_pool.get_balances()
        result = seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)
        after = seeded_pool.get_balances()

        assert after[IDRX] == before[IDRX]
        assert after[USDC] == before[USDC] + THOUSAND_USDC
        assert after[EURC] == before[EURC] - result.amount_out

    def test_ledgers_move(self, seeded_pool):
        usdc, eurc = seeded_pool.ledgers[USDC], seeded_pool.ledgers[EURC]
        usdc_before, eurc_before = usdc.balance_of(BOB), eurc.balance_of(BOB)

        result = seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        assert usdc.balance_of(BOB) == usdc_before - THOUSAND_USDC
        assert eurc.balance_of(BOB) == eurc_before + result.amount_out

    def test_invariant_does_not_decrease(self, seeded_pool):
        d_before = seeded_pool.get_invariant()
        seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)
        assert seeded_pool.get_invariant() >= d_before

    def test_shares_untouched(self, seeded_pool):
        total = seeded_pool.get_total_shares()
        seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC)
        assert seeded_pool.get_total_shares() == total
        assert seeded_pool.get_shares(BOB) == 0


class TestSwapRejection:
    """Tests for rejected swaps."""

    def test_slippage_one_unit_above_quote(self, seeded_pool):
        quoted = seeded_pool.get_dy(USDC, EURC, THOUSAND_USDC)
        before = seeded_pool.snapshot()

        with pytest.raises(SlippageExceeded):
            seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC, min_dy=quoted + 1)

        assert seeded_pool.snapshot() == before

    def test_slippage_at_quote_passes(self, seeded_pool):
        quoted = seeded_pool.get_dy(USDC, EURC, THOUSAND_USDC)
        result = seeded_pool.swap(BOB, USDC, EURC, THOUSAND_USDC, min_dy=quoted)
        assert result.amount_out == quoted

    def test_same_token(self, seeded_pool):
        with pytest.raises(SameTokenSwap):
            seeded_pool.swap(BOB, USDC, USDC, THOUSAND_USDC)

    @pytest.mark.parametrize("i,j", [(3, 0), (0, 3), (-1, 2)])
    def test_index_out_of_range(self, seeded_pool, i, j):
        with pytest.raises(IndexOutOfRange):
            seeded_pool.swap(BOB, i, j, THOUSAND_USDC)

    def test_empty_pool(self, pool):
        with pytest.raises(NoLiquidity):
            pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

    @pytest.mark.parametrize("bad", [-1, 1.5, "100", None])
    def test_invalid_amount(self, seeded_pool, bad):
        with pytest.raises(InvalidAmount):
            seeded_pool.swap(BOB, USDC, EURC, bad)

    def test_balance_overflow_rejected_before_debit(self, seeded_pool):
        before = seeded_pool.snapshot()
        bob_before = seeded_pool.ledgers[USDC].balance_of(BOB)
        with pytest.raises(InvalidAmount):
            seeded_pool.swap(BOB, USDC, EURC, 2**256 - 1)
        assert seeded_pool.snapshot() == before
        assert seeded_pool.ledgers[USDC].balance_of(BOB) == bob_before

    def test_unfunded_actor(self, seeded_pool):
        """Carol holds nothing, so the inbound debit is refused."""
        before = seeded_pool.snapshot()
        with pytest.raises(TransferFailed):
            seeded_pool.swap(CAROL, USDC, EURC, THOUSAND_USDC)
        assert seeded_pool.snapshot() == before
        assert seeded_pool.ledgers[EURC].balance_of(CAROL) == 0
