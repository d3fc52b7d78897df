"""StableSwap invariant solver.

Solves A*n^n*S + D^(n+1)/(n^n*prod(x)) = A*n^n*D + D for D with
Newton-Raphson iteration over integers. The amplification is applied as
A*n (the n^n factor comes in through the iterative D_P term).

All arithmetic goes through SafeInt so that a division by zero or an
underflow surfaces as an exception instead of a wrong invariant.
"""

from collections.abc import Sequence

import structlog

from stableswap.constants import MAX_ITERATIONS, N_COINS
from stableswap.errors import NumericNonConvergence, ZeroBalanceError
from stableswap.safe_int import S

logger = structlog.get_logger()


def compute_d(xp: Sequence[int], amp: int) -> int:
    """Calculate the invariant D of normalized balances.

    Algorithm:
        1. Initial guess: D = sum(xp)
        2. Iterate D' = (A*n*S + n*D_P) * D / ((A*n - 1) * D + (n + 1) * D_P)
           where D_P = D^(n+1) / (n^n * prod(xp)), accumulated one factor at a time
        3. Stop when |D' - D| <= 1; give up after MAX_ITERATIONS

    Args:
        xp: Normalized balances, exactly N_COINS entries
        amp: Amplification coefficient A (>= 1)

    Returns:
        The invariant D (0 for an empty pool)

    Raises:
        ZeroBalanceError: If some but not all balances are zero
        NumericNonConvergence: If the iteration does not converge
    """
    if len(xp) != N_COINS:
        raise ValueError(f"Expected {N_COINS} balances, got {len(xp)}")

    s = S(sum(xp))
    if s == 0:
        return 0

    for i, x in enumerate(xp):
        if x <= 0:
            raise ZeroBalanceError(f"Normalized balance at index {i} must be positive")

    ann = S(amp) * N_COINS
    d = s

    for _ in range(MAX_ITERATIONS):
        d_p = d
        for x in xp:
            d_p = (d_p * d) // (S(x) * N_COINS)

        d_prev = d
        numerator = (ann * s + d_p * N_COINS) * d
        denominator = (ann - 1) * d + d_p * (N_COINS + 1)
        d = numerator // denominator

        if d.abs_diff(d_prev) <= 1:
            return d.value

    logger.error("invariant_did_not_converge", xp=list(xp), amp=amp)
    raise NumericNonConvergence(f"Invariant did not converge after {MAX_ITERATIONS} iterations")
