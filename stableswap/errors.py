"""Pool error classes.

Every failure a pool operation can report is a StableSwapError subclass.
Each carries a stable ``kind`` string that the HTTP layer exposes to clients.
A raised error always means the operation left no state change and no
token movement behind.
"""


class StableSwapError(Exception):
    """Base error for pool operations."""

    kind = "StableSwapError"


class IndexOutOfRange(StableSwapError):
    """Asset index is not in [0, N)."""

    kind = "IndexOutOfRange"


class SameTokenSwap(StableSwapError):
    """Swap input and output asset are the same."""

    kind = "SameTokenSwap"


class SlippageExceeded(StableSwapError):
    """Realized output is below the caller's minimum."""

    kind = "SlippageExceeded"


class LiquidityNotIncreased(StableSwapError):
    """Deposit did not raise the invariant."""

    kind = "LiquidityNotIncreased"


class InsufficientSharesMinted(StableSwapError):
    """Minted shares are below the caller's minimum."""

    kind = "InsufficientSharesMinted"


class NoLiquidity(StableSwapError):
    """Pool has no shares outstanding."""

    kind = "NoLiquidity"


class InvalidSharesAmount(StableSwapError):
    """Share amount is zero, exceeds the holder's balance, or cannot be burned this way."""

    kind = "InvalidSharesAmount"


class InvalidAmount(StableSwapError):
    """Token amount is negative or malformed."""

    kind = "InvalidAmount"


class ZeroBalanceError(StableSwapError):
    """A normalized balance is zero where the invariant needs it positive."""

    kind = "ZeroBalance"


class NumericNonConvergence(StableSwapError):
    """Newton-Raphson iteration exhausted its budget or left its domain.

    Unreachable for well-formed pools; treated as fatal for the operation.
    """

    kind = "NumericNonConvergence"


class InvalidPoolConfig(StableSwapError):
    """Pool configuration is malformed."""

    kind = "InvalidPoolConfig"


class TransferFailed(StableSwapError):
    """The token ledger refused a debit or credit."""

    kind = "TransferFailed"


class ReentrancyError(StableSwapError):
    """A mutating operation was entered while another one is in flight."""

    kind = "ReentrancyError"


class PoolNotFound(StableSwapError):
    """No pool is registered under the requested id."""

    kind = "PoolNotFound"
