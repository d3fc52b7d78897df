"""StableSwap numerical core.

- normalize: raw balances to 18-decimal normalized balances (xp)
- invariant: compute_d, the Newton-Raphson invariant solver
- balance: solve_y_given_x / solve_balance_for_d, the counter-balance solvers
"""

from stableswap.math.balance import check_index, solve_balance_for_d, solve_y_given_x
from stableswap.math.invariant import compute_d
from stableswap.math.normalize import denormalize_down, normalize, normalize_amount

__all__ = [
    "check_index",
    "compute_d",
    "denormalize_down",
    "normalize",
    "normalize_amount",
    "solve_balance_for_d",
    "solve_y_given_x",
]
