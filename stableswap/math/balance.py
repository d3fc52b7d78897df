"""Counter-balance solvers for swaps and single-asset withdrawals.

Both entry points hold every balance but one fixed and solve

    y^2 + y * (b - D) - c = 0

for the free balance y with the iteration y' = (y^2 + c) / (2y + b - D),
where, over the fixed balances x_k,

    s = sum(x_k)
    c = D^(n+1) / (n^n * A*n * prod(x_k))
    b = s + D / (A*n)

The term b - D may be negative. The full denominator 2y + b - D is checked
on every step and a non-positive value aborts with NumericNonConvergence.
"""

from collections.abc import Iterable, Sequence

import structlog

from stableswap.constants import MAX_ITERATIONS, N_COINS
from stableswap.errors import IndexOutOfRange, NumericNonConvergence, SameTokenSwap
from stableswap.math.invariant import compute_d
from stableswap.safe_int import S

logger = structlog.get_logger()


def check_index(index: int, name: str) -> None:
    if not 0 <= index < N_COINS:
        raise IndexOutOfRange(f"{name} {index} out of range for {N_COINS} assets")


def _solve_quadratic(fixed: Iterable[int], d: int, amp: int) -> int:
    """Newton iteration for the free balance given the other N-1 balances."""
    d_s = S(d)
    ann = S(amp) * N_COINS
    c = d_s
    s = S(0)

    for x in fixed:
        s = s + x
        c = (c * d_s) // (S(x) * N_COINS)

    c = (c * d_s) // (ann * N_COINS)
    b = s + d_s // ann

    y = d_s
    for _ in range(MAX_ITERATIONS):
        y_prev = y
        partial = S(2) * y + b
        if partial <= d_s:
            logger.error(
                "balance_solver_left_domain",
                invariant=d,
                amp=amp,
                y=y.value,
                b=b.value,
            )
            raise NumericNonConvergence("Balance solver denominator became non-positive")
        y = (y * y + c) // (partial - d_s)

        if y.abs_diff(y_prev) <= 1:
            return y.value

    logger.error("balance_solver_did_not_converge", invariant=d, amp=amp)
    raise NumericNonConvergence(f"Balance solver did not converge after {MAX_ITERATIONS} iterations")


def solve_y_given_x(i: int, j: int, new_x: int, xp: Sequence[int], amp: int) -> int:
    """Solve for xp[j] after xp[i] becomes new_x, keeping the invariant unchanged.

    The invariant is computed from xp as it stands before the change. This is
    the swap primitive: xp[j] - result is how much of asset j must leave the
    pool when new_x - xp[i] of asset i enters it.

    Args:
        i: Index of the asset whose balance changes
        j: Index of the asset to solve for
        new_x: New normalized balance of asset i
        xp: Normalized balances before the change
        amp: Amplification coefficient A

    Returns:
        The new normalized balance of asset j

    Raises:
        IndexOutOfRange: If i or j is not a valid asset index
        SameTokenSwap: If i == j
        NumericNonConvergence: If either solver fails
    """
    check_index(i, "from index")
    check_index(j, "to index")
    if i == j:
        raise SameTokenSwap("Cannot solve an asset against itself")

    d = compute_d(xp, amp)
    fixed = [new_x if k == i else xp[k] for k in range(N_COINS) if k != j]
    return _solve_quadratic(fixed, d, amp)


def solve_balance_for_d(i: int, xp: Sequence[int], target_d: int, amp: int) -> int:
    """Solve for xp[i] such that the invariant equals target_d.

    All other balances stay as given. Used to price withdrawals, where
    target_d is the invariant left after retiring shares.

    Raises:
        IndexOutOfRange: If i is not a valid asset index
        NumericNonConvergence: If the solver fails
    """
    check_index(i, "asset index")
    fixed = [xp[k] for k in range(N_COINS) if k != i]
    return _solve_quadratic(fixed, target_d, amp)
