"""End-to-end properties of a pool under sequences of operations."""

import threading

import pytest

from stableswap.errors import SlippageExceeded
from stableswap.math import compute_d, normalize
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
    make_pool,
)

# (from, to, raw amount in): a mixed sequence of swaps in every direction
SWAP_SEQUENCE = [
    (USDC, EURC, 1_000_000_000),
    (EURC, IDRX, 500_000_000),
    (IDRX, USDC, 2_000_000_000),
    (USDC, EURC, 3_000_000_000),
    (EURC, USDC, 2_500_000_000),
    (IDRX, EURC, 100_000),
    (USDC, IDRX, 1),
]


def assert_books_balance(pool):
    """Ledger custody matches pool balances; shares add up to the supply."""
    for ledger, balance in zip(pool.ledgers, pool.get_balances(), strict=True):
        assert ledger.custody == balance
    snapshot = pool.snapshot()
    assert sum(snapshot.shares_of.values()) == snapshot.total_shares


class TestGenesis:
    def test_shares_equal_invariant_of_deposit(self, pool):
        amounts = (12_345_678_901, 7_000_000_000, 9_999_999_999)
        expected = compute_d(normalize(amounts, pool.config.multipliers), 100)
        assert pool.add_liquidity(ALICE, amounts).shares == expected


class TestSwapSequence:
    def test_virtual_price_monotonic(self, seeded_pool):
        price = seeded_pool.get_virtual_price()
        for i, j, dx in SWAP_SEQUENCE:
            seeded_pool.swap(BOB, i, j, dx)
            new_price = seeded_pool.get_virtual_price()
            assert new_price >= price
            price = new_price

    def test_invariant_monotonic(self, seeded_pool):
        d = seeded_pool.get_invariant()
        for i, j, dx in SWAP_SEQUENCE:
            seeded_pool.swap(BOB, i, j, dx)
            assert seeded_pool.get_invariant() >= d
            d = seeded_pool.get_invariant()

    def test_books_balance_after_mixed_operations(self, seeded_pool):
        shares = seeded_pool.add_liquidity(BOB, TENTH_AMOUNTS).shares
        for i, j, dx in SWAP_SEQUENCE:
            seeded_pool.swap(BOB, i, j, dx)
        seeded_pool.remove_liquidity_one_token(BOB, shares // 2, EURC)
        seeded_pool.remove_liquidity(ALICE, BALANCED_D // 3)
        assert_books_balance(seeded_pool)


class TestRoundTrip:
    def test_proportional_round_trip_never_gains(self, seeded_pool):
        for i, j, dx in SWAP_SEQUENCE:
            seeded_pool.swap(BOB, i, j, dx)
        # Deposit in the pool's current ratio, rounded down
        balances = seeded_pool.get_balances()
        amounts = tuple(b // 20 for b in balances)

        shares = seeded_pool.add_liquidity(BOB, amounts).shares
        out = seeded_pool.remove_liquidity(BOB, shares)

        assert all(o <= a for o, a in zip(out, amounts, strict=True))

    def test_one_token_round_trip_loses(self, seeded_pool):
        deposit = (TENTH_AMOUNTS[IDRX], 0, 0)
        shares = seeded_pool.add_liquidity(BOB, deposit).shares
        out = seeded_pool.remove_liquidity_one_token(BOB, shares, IDRX)
        assert out < deposit[IDRX]


class TestRejectionBoundary:
    @pytest.mark.parametrize("i,j,dx", SWAP_SEQUENCE[:4])
    def test_one_unit_short(self, seeded_pool, i, j, dx):
        quoted = seeded_pool.get_dy(i, j, dx)
        before = seeded_pool.snapshot()
        with pytest.raises(SlippageExceeded):
            seeded_pool.swap(BOB, i, j, dx, min_dy=quoted + 1)
        after = seeded_pool.snapshot()
        assert after.balances == before.balances
        assert after.total_shares == before.total_shares


class TestConcurrency:
    def test_parallel_operations_keep_books(self):
        actors = [f"trader-{k}" for k in range(6)]
        pool = make_pool(funded={ALICE: FUNDING, **{a: FUNDING for a in actors}})
        pool.add_liquidity(ALICE, BALANCED_AMOUNTS)
        errors: list[Exception] = []

        def trade(actor: str, offset: int) -> None:
            try:
                pool.add_liquidity(actor, TENTH_AMOUNTS)
                for n in range(10):
                    i, j, dx = SWAP_SEQUENCE[(n + offset) % len(SWAP_SEQUENCE)]
                    pool.swap(actor, i, j, dx // 10 or 1)
                pool.remove_liquidity(actor, pool.get_shares(actor) // 2)
            except Exception as err:
                errors.append(err)

        threads = [
            threading.Thread(target=trade, args=(actor, k)) for k, actor in enumerate(actors)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert_books_balance(pool)
        assert pool.get_virtual_price() >= 10**18

    def test_independent_pools(self):
        pools = [make_pool(pool_id=f"pool-{k}") for k in range(3)]

        def seed(pool):
            pool.add_liquidity(ALICE, BALANCED_AMOUNTS)
            pool.swap(BOB, USDC, EURC, 1_000_000)

        threads = [threading.Thread(target=seed, args=(p,)) for p in pools]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        balances = {p.get_balances() for p in pools}
        assert len(balances) == 1
