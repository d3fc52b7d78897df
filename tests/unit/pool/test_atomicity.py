"""Tests for rollback of failed operations and reentrancy protection."""

import pytest

from stableswap.errors import ReentrancyError, TransferFailed
from stableswap.pool import StableSwapPool, default_pool_config
from tests.helpers import (
    ALICE,
    BALANCED_AMOUNTS,
    BALANCED_D,
    BOB,
    EURC,
    FUNDING,
    IDRX,
    TENTH_AMOUNTS,
    USDC,
    ScriptedLedger,
    make_ledgers,
)

THOUSAND_USDC = 1_000_000_000


@pytest.fixture
def scripted() -> tuple[StableSwapPool, list[ScriptedLedger]]:
    """Seeded pool whose ledgers can be told to fail."""
    config = default_pool_config(pool_id="scripted")
    inner = make_ledgers(config, {ALICE: FUNDING, BOB: FUNDING})
    ledgers = [ScriptedLedger(ledger) for ledger in inner]
    pool = StableSwapPool(config, ledgers)
    pool.add_liquidity(ALICE, BALANCED_AMOUNTS)
    return pool, ledgers


def holdings(ledgers, owner):
    return [ledger.balance_of(owner) for ledger in ledgers]


def custody(ledgers):
    return [ledger.inner.custody for ledger in ledgers]


class TestSwapRollback:
    def test_refused_credit_reverses_debit(self, scripted):
        pool, ledgers = scripted
        state_before = pool.snapshot()
        bob_before = holdings(ledgers, BOB)
        custody_before = custody(ledgers)
        ledgers[EURC].fail_credit = True

        with pytest.raises(TransferFailed):
            pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        assert pool.snapshot() == state_before
        assert holdings(ledgers, BOB) == bob_before
        assert custody(ledgers) == custody_before

    def test_raising_credit_is_wrapped(self, scripted):
        pool, ledgers = scripted
        state_before = pool.snapshot()
        ledgers[EURC].raise_on_credit = RuntimeError("node unreachable")

        with pytest.raises(TransferFailed) as exc_info:
            pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert pool.snapshot() == state_before

    def test_refused_debit(self, scripted):
        pool, ledgers = scripted
        state_before = pool.snapshot()
        ledgers[USDC].fail_debit = True

        with pytest.raises(TransferFailed):
            pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        assert pool.snapshot() == state_before

    def test_pool_usable_after_rollback(self, scripted):
        pool, ledgers = scripted
        ledgers[EURC].fail_credit = True
        with pytest.raises(TransferFailed):
            pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        ledgers[EURC].fail_credit = False
        assert pool.swap(BOB, USDC, EURC, THOUSAND_USDC).amount_out > 0


class TestLiquidityRollback:
    def test_deposit_partial_pull_reversed(self, scripted):
        """The third debit fails after the first two succeeded."""
        pool, ledgers = scripted
        state_before = pool.snapshot()
        bob_before = holdings(ledgers, BOB)
        ledgers[EURC].fail_debit = True

        with pytest.raises(TransferFailed):
            pool.add_liquidity(BOB, TENTH_AMOUNTS)

        assert pool.snapshot() == state_before
        assert holdings(ledgers, BOB) == bob_before
        assert pool.get_shares(BOB) == 0

    def test_failed_reversal_does_not_stop_unwind(self, scripted):
        """The USDC refund raises; the IDRX refund still happens."""
        pool, ledgers = scripted
        state_before = pool.snapshot()
        bob_before = holdings(ledgers, BOB)
        ledgers[EURC].fail_debit = True
        ledgers[USDC].raise_on_credit = RuntimeError("reversal failed")

        with pytest.raises(TransferFailed):
            pool.add_liquidity(BOB, TENTH_AMOUNTS)

        assert pool.snapshot() == state_before
        bob_after = holdings(ledgers, BOB)
        assert bob_after[IDRX] == bob_before[IDRX]
        assert bob_after[USDC] == bob_before[USDC] - TENTH_AMOUNTS[USDC]
        assert bob_after[EURC] == bob_before[EURC]
        assert ledgers[IDRX].inner.custody == pool.get_balances()[IDRX]

    def test_withdrawal_partial_push_reversed(self, scripted):
        """The second credit fails after the first one succeeded."""
        pool, ledgers = scripted
        state_before = pool.snapshot()
        alice_before = holdings(ledgers, ALICE)
        ledgers[USDC].fail_credit = True

        with pytest.raises(TransferFailed):
            pool.remove_liquidity(ALICE, BALANCED_D // 2)

        assert pool.snapshot() == state_before
        assert holdings(ledgers, ALICE) == alice_before
        assert custody(ledgers) == list(BALANCED_AMOUNTS)

    def test_one_token_withdrawal_reversed(self, scripted):
        pool, ledgers = scripted
        state_before = pool.snapshot()
        ledgers[IDRX].fail_credit = True

        with pytest.raises(TransferFailed):
            pool.remove_liquidity_one_token(ALICE, BALANCED_D // 10, IDRX)

        assert pool.snapshot() == state_before


class TestReentrancy:
    def test_reentrant_swap_rejected(self, scripted):
        pool, ledgers = scripted
        state_before = pool.snapshot()
        ledgers[EURC].on_credit = lambda: pool.swap(BOB, IDRX, USDC, 100)

        with pytest.raises(TransferFailed) as exc_info:
            pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        assert isinstance(exc_info.value.__cause__, ReentrancyError)
        assert pool.snapshot() == state_before

    def test_reentrant_view_sees_committed_state(self, scripted):
        """State is committed before the outbound credit runs."""
        pool, ledgers = scripted
        seen = []
        ledgers[EURC].on_credit = lambda: seen.append(pool.get_balances())

        result = pool.swap(BOB, USDC, EURC, THOUSAND_USDC)

        assert seen == [pool.get_balances()]
        assert seen[0][EURC] == BALANCED_AMOUNTS[EURC] - result.amount_out

    def test_disarmed_ledger_passes_through(self, scripted):
        pool, ledgers = scripted
        ledgers[EURC].fail_credit = True
        ledgers[EURC].armed = False
        assert pool.swap(BOB, USDC, EURC, THOUSAND_USDC).amount_out > 0
