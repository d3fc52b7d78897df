"""Three-asset StableSwap pool.

StableSwapPool owns a PoolState and composes the numerical core
(normalize, compute_d, the balance solvers, FeeModel) into the pool
operations. Every mutating operation follows the same shape:

    1. price the operation purely from the current state
    2. validate slippage bounds and share ownership
    3. pull inbound amounts through the ledgers
    4. commit balances and shares
    5. push outbound amounts through the ledgers

A failure at any step restores the state snapshot and reverses every ledger
movement already made, so a raised error always means "nothing happened".
Operations on one pool are serialized by a per-pool lock.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from stableswap.constants import N_COINS, PRECISION
from stableswap.errors import (
    InsufficientSharesMinted,
    InvalidAmount,
    InvalidPoolConfig,
    InvalidSharesAmount,
    LiquidityNotIncreased,
    NoLiquidity,
    ReentrancyError,
    SameTokenSwap,
    SlippageExceeded,
    TransferFailed,
)
from stableswap.math import (
    check_index,
    compute_d,
    denormalize_down,
    normalize,
    normalize_amount,
    solve_balance_for_d,
    solve_y_given_x,
)
from stableswap.safe_int import UINT256_MAX, S, Uint256Overflow

from .config import PoolConfig
from .events import (
    EventListener,
    LiquidityAdded,
    LiquidityRemoved,
    LiquidityRemovedOneToken,
    PoolEvent,
    SwapExecuted,
)
from .ledger import TokenLedger
from .state import ZERO_AMOUNTS, Amounts, PoolState, StateSnapshot

logger = structlog.get_logger()

# (asset index, owner, raw amount)
Movement = tuple[int, str, int]


@dataclass(frozen=True)
class SwapResult:
    """Outcome of a swap.

    Attributes:
        amount_out: Raw units of the output asset paid to the actor
        fee: Raw units of the output asset kept by the pool
    """

    amount_out: int
    fee: int


@dataclass(frozen=True)
class AddLiquidityResult:
    """Outcome of a deposit.

    Attributes:
        shares: Shares minted to the depositor
        fees: Imbalance fee per asset, in normalized units
        total_shares: Share supply once the shares are minted
    """

    shares: int
    fees: tuple[int, ...] = ZERO_AMOUNTS
    total_shares: int = 0


@dataclass(frozen=True)
class WithdrawOneQuote:
    """Price of a single-asset withdrawal.

    Attributes:
        amount: Raw units of the asset paid out
        fee: Raw units withheld relative to a fee-free withdrawal
    """

    amount: int
    fee: int


class _Settlement:
    """Ledger movements of one operation, reversible until it completes."""

    def __init__(self, pool_id: str, ledgers: Sequence[TokenLedger]) -> None:
        self._pool_id = pool_id
        self._ledgers = ledgers
        self._done: list[tuple[str, Movement]] = []

    def pull(self, index: int, owner: str, amount: int) -> None:
        if amount == 0:
            return
        self._call("debit", index, owner, amount)
        self._done.append(("debit", (index, owner, amount)))

    def push(self, index: int, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        self._call("credit", index, recipient, amount)
        self._done.append(("credit", (index, recipient, amount)))

    def _call(self, action: str, index: int, account: str, amount: int) -> None:
        ledger = self._ledgers[index]
        try:
            ok = getattr(ledger, action)(account, amount)
        except TransferFailed:
            raise
        except Exception as err:
            raise TransferFailed(
                f"Ledger {action} of {amount} for asset {index} raised: {err}"
            ) from err
        if not ok:
            raise TransferFailed(f"Ledger refused {action} of {amount} for asset {index}")

    def unwind(self) -> None:
        """Reverse completed movements, newest first.

        A reversal that is refused or raises is logged and skipped; the
        remaining movements are still reversed.
        """
        for action, (index, account, amount) in reversed(self._done):
            ledger = self._ledgers[index]
            context = {
                "pool_id": self._pool_id,
                "action": action,
                "asset_index": index,
                "account": account,
                "amount": amount,
            }
            try:
                reversed_ok = (
                    ledger.credit(account, amount)
                    if action == "debit"
                    else ledger.debit(account, amount)
                )
            except Exception:
                logger.exception("ledger_unwind_failed", **context)
                continue
            if not reversed_ok:
                logger.error("ledger_unwind_failed", **context)
        self._done.clear()


def _check_amount(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= UINT256_MAX:
        raise InvalidAmount(f"{name} must be in [0, 2^256-1], got {value}")
    return value


def _check_amounts(values: Sequence[int], name: str) -> Amounts:
    if len(values) != N_COINS:
        raise InvalidAmount(f"{name} needs exactly {N_COINS} entries, got {len(values)}")
    return tuple(_check_amount(v, f"{name}[{k}]") for k, v in enumerate(values))  # type: ignore[return-value]


def _add_to_balances(balances: Amounts, amounts: Sequence[int]) -> Amounts:
    """Balances after receiving amounts; every result must stay a uint256."""
    try:
        return tuple(  # type: ignore[return-value]
            (S(b) + a).to_uint256() for b, a in zip(balances, amounts, strict=True)
        )
    except Uint256Overflow as err:
        raise InvalidAmount(f"Inbound amount would overflow a pool balance: {err}") from err


class StableSwapPool:
    """A three-asset StableSwap pool with share accounting.

    Args:
        config: Immutable pool parameters
        ledgers: One token ledger per asset, in asset index order
        state: Initial state (defaults to an empty pool)
    """

    def __init__(
        self,
        config: PoolConfig,
        ledgers: Sequence[TokenLedger],
        state: PoolState | None = None,
    ) -> None:
        if len(ledgers) != N_COINS:
            raise InvalidPoolConfig(f"Pool needs {N_COINS} ledgers, got {len(ledgers)}")
        self.config = config
        self._ledgers = tuple(ledgers)
        self._state = state if state is not None else PoolState()
        self._lock = threading.RLock()
        self._in_operation = False
        self._listeners: list[EventListener] = []

    @property
    def pool_id(self) -> str:
        return self.config.pool_id

    @property
    def ledgers(self) -> tuple[TokenLedger, ...]:
        return self._ledgers

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback for notifications of committed operations."""
        self._listeners.append(listener)

    def _emit(self, event: PoolEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # The operation has already committed; a listener cannot undo it.
                logger.exception(
                    "pool_listener_failed",
                    pool_id=self.pool_id,
                    event=type(event).__name__,
                )

    # =========================================================================
    # Transaction helpers
    # =========================================================================

    @contextmanager
    def _operation(self, name: str) -> Iterator[list[PoolEvent]]:
        """Serialize a mutating operation and emit its events once it commits."""
        with self._lock:
            if self._in_operation:
                raise ReentrancyError(f"{name} entered while another operation is in flight")
            self._in_operation = True
            pending: list[PoolEvent] = []
            try:
                yield pending
            finally:
                self._in_operation = False
            for event in pending:
                self._emit(event)

    def _execute(
        self,
        operation: str,
        inbound: Sequence[Movement],
        apply: Callable[[], None],
        outbound: Sequence[Movement],
    ) -> None:
        """Pull inbound, commit state, push outbound; roll everything back on failure."""
        snapshot: StateSnapshot = self._state.snapshot()
        settlement = _Settlement(self.pool_id, self._ledgers)
        try:
            for index, owner, amount in inbound:
                settlement.pull(index, owner, amount)
            apply()
            for index, recipient, amount in outbound:
                settlement.push(index, recipient, amount)
        except Exception as err:
            self._state.restore(snapshot)
            settlement.unwind()
            logger.warning(
                "pool_operation_rolled_back",
                pool_id=self.pool_id,
                operation=operation,
                error=type(err).__name__,
                detail=str(err),
            )
            raise

    def _xp(self) -> tuple[int, ...]:
        return normalize(self._state.balances, self.config.multipliers)

    def _check_burn(self, actor: str, shares: int) -> int:
        shares = _check_amount(shares, "shares")
        if shares == 0:
            raise InvalidSharesAmount("Share amount must be positive")
        held = self._state.shares(actor)
        if shares > held:
            raise InvalidSharesAmount(f"{actor} holds {held} shares, cannot burn {shares}")
        return shares

    # =========================================================================
    # Pricing (pure with respect to pool state)
    # =========================================================================

    def _quote_swap(self, i: int, j: int, dx: int) -> SwapResult:
        check_index(i, "from index")
        check_index(j, "to index")
        if i == j:
            raise SameTokenSwap(f"Cannot swap asset {i} for itself")
        dx = _check_amount(dx, "amount_in")
        if self._state.is_empty:
            raise NoLiquidity("Pool has no liquidity to swap against")

        multipliers = self.config.multipliers
        xp = self._xp()
        x = (S(xp[i]) + normalize_amount(dx, multipliers[i])).value
        y0 = xp[j]
        y1 = solve_y_given_x(i, j, x, xp, self.config.amplification)

        # Subtract one before scaling down so rounding always favors the pool
        dy_raw = S(y0).saturating_sub(S(y1) + 1) // multipliers[j]
        dy, fee = self.config.fees.apply_swap_fee(dy_raw.value)
        return SwapResult(amount_out=dy, fee=fee)

    def _imbalance_adjusted_d(
        self,
        old_xp: Sequence[int],
        new_xp: Sequence[int],
        d0: int,
        d1: int,
    ) -> tuple[int, tuple[int, ...]]:
        """Invariant of new_xp after charging the liquidity fee on its imbalance."""
        ideal = tuple(S(x).mul_div(d1, d0).value for x in old_xp)
        fees = self.config.fees.imbalance_fees(new_xp, ideal)
        adjusted = tuple((S(x) - f).value for x, f in zip(new_xp, fees, strict=True))
        return compute_d(adjusted, self.config.amplification), fees

    def _quote_deposit(self, amounts: Amounts) -> AddLiquidityResult:
        amp = self.config.amplification
        total = self._state.total_shares
        old_xp = self._xp()

        if total == 0:
            if any(a == 0 for a in amounts):
                raise LiquidityNotIncreased("Initial deposit requires every asset")
            d0 = 0
        else:
            d0 = compute_d(old_xp, amp)

        new_xp = tuple(
            (S(x) + normalize_amount(a, m)).value
            for x, a, m in zip(old_xp, amounts, self.config.multipliers, strict=True)
        )
        d1 = compute_d(new_xp, amp)
        if d1 <= d0:
            raise LiquidityNotIncreased(f"Deposit does not increase invariant ({d0} -> {d1})")

        # Genesis deposit: there is no prior ratio to be imbalanced against
        if total == 0:
            return AddLiquidityResult(shares=d1, total_shares=d1)

        d2, fees = self._imbalance_adjusted_d(old_xp, new_xp, d0, d1)
        if d2 <= d0:
            raise LiquidityNotIncreased(f"Deposit is consumed by imbalance fees ({d0} -> {d2})")
        shares = (S(d2) - d0).mul_div(total, d0).value
        return AddLiquidityResult(shares=shares, fees=fees, total_shares=total + shares)

    def _quote_withdraw_one(self, shares: int, i: int) -> WithdrawOneQuote:
        check_index(i, "asset index")
        total = self._state.total_shares
        if total == 0:
            raise NoLiquidity("Pool has no shares outstanding")
        shares = _check_amount(shares, "shares")
        if shares == 0 or shares > total:
            raise InvalidSharesAmount(f"Share amount must be in (0, {total}], got {shares}")
        if shares == total:
            raise InvalidSharesAmount("Withdraw the full supply proportionally")

        amp = self.config.amplification
        multiplier = self.config.multipliers[i]
        xp = self._xp()
        d0 = compute_d(xp, amp)
        d1 = (S(d0) - S(d0).mul_div(shares, total)).value

        y0 = solve_balance_for_d(i, xp, d1, amp)
        dy0 = S(xp[i]).saturating_sub(y0) // multiplier

        reduced = []
        for k, x in enumerate(xp):
            ideal = S(x).mul_div(d1, d0)
            actual = y0 if k == i else x
            fee = self.config.fees.imbalance_fee(ideal.abs_diff(actual).value)
            reduced.append((S(x) - fee).value)

        y1 = solve_balance_for_d(i, reduced, d1, amp)
        dy = S(reduced[i]).saturating_sub(S(y1) + 1) // multiplier
        return WithdrawOneQuote(amount=dy.value, fee=dy0.saturating_sub(dy).value)

    # =========================================================================
    # Mutating operations
    # =========================================================================

    def swap(self, actor: str, i: int, j: int, dx: int, min_dy: int = 0) -> SwapResult:
        """Sell dx of asset i for asset j.

        Raises:
            IndexOutOfRange, SameTokenSwap, NoLiquidity, InvalidAmount
            SlippageExceeded: If the output after fee is below min_dy
            TransferFailed: If a ledger movement fails
        """
        with self._operation("swap") as events:
            dx = _check_amount(dx, "amount_in")
            inflow = tuple(dx if k == i else 0 for k in range(N_COINS))
            balances = list(_add_to_balances(self._state.balances, inflow))
            result = self._quote_swap(i, j, dx)
            if result.amount_out < min_dy:
                logger.debug(
                    "swap_rejected",
                    pool_id=self.pool_id,
                    reason="slippage",
                    amount_out=result.amount_out,
                    min_amount_out=min_dy,
                )
                raise SlippageExceeded(f"Swap output {result.amount_out} below minimum {min_dy}")

            balances[j] = (S(balances[j]) - result.amount_out).value

            self._execute(
                "swap",
                inbound=[(i, actor, dx)],
                apply=lambda: self._state.set_balances(tuple(balances)),
                outbound=[(j, actor, result.amount_out)],
            )

            logger.info(
                "swap_executed",
                pool_id=self.pool_id,
                actor=actor,
                from_index=i,
                to_index=j,
                amount_in=dx,
                amount_out=result.amount_out,
                fee=result.fee,
            )
            events.append(SwapExecuted(actor, i, j, dx, result.amount_out))
        return result

    def add_liquidity(
        self,
        actor: str,
        amounts: Sequence[int],
        min_shares: int = 0,
    ) -> AddLiquidityResult:
        """Deposit amounts of each asset and mint shares.

        Raises:
            LiquidityNotIncreased: If the deposit does not raise the invariant
            InsufficientSharesMinted: If fewer than min_shares would be minted
            InvalidAmount, TransferFailed
        """
        with self._operation("add_liquidity") as events:
            amounts = _check_amounts(amounts, "amounts")
            balances = _add_to_balances(self._state.balances, amounts)
            result = self._quote_deposit(amounts)
            if result.shares < min_shares:
                logger.debug(
                    "add_liquidity_rejected",
                    pool_id=self.pool_id,
                    reason="slippage",
                    shares=result.shares,
                    min_shares=min_shares,
                )
                raise InsufficientSharesMinted(
                    f"Deposit mints {result.shares} shares, below minimum {min_shares}"
                )

            def apply() -> None:
                self._state.set_balances(balances)
                self._state.mint(actor, result.shares)
                self._state.record_deposit(actor, amounts)

            self._execute(
                "add_liquidity",
                inbound=[(k, actor, a) for k, a in enumerate(amounts)],
                apply=apply,
                outbound=[],
            )

            logger.info(
                "liquidity_added",
                pool_id=self.pool_id,
                actor=actor,
                amounts=list(amounts),
                shares=result.shares,
                fees=list(result.fees),
                total_shares=result.total_shares,
            )
            events.append(
                LiquidityAdded(actor, amounts, result.shares, result.fees, result.total_shares)
            )
        return result

    def remove_liquidity(
        self,
        actor: str,
        shares: int,
        min_amounts: Sequence[int] = ZERO_AMOUNTS,
    ) -> Amounts:
        """Burn shares for a pro-rata slice of every balance. No fee is charged.

        Raises:
            NoLiquidity: If no shares are outstanding
            InvalidSharesAmount: If shares is zero or exceeds the actor's balance
            SlippageExceeded: If any output is below its minimum
        """
        with self._operation("remove_liquidity") as events:
            total = self._state.total_shares
            if total == 0:
                raise NoLiquidity("Pool has no shares outstanding")
            shares = self._check_burn(actor, shares)
            min_amounts = _check_amounts(min_amounts, "min_amounts")

            amounts_out: Amounts = tuple(  # type: ignore[assignment]
                S(b).mul_div(shares, total).value for b in self._state.balances
            )
            for k, (out, minimum) in enumerate(zip(amounts_out, min_amounts, strict=True)):
                if out < minimum:
                    logger.debug(
                        "remove_liquidity_rejected",
                        pool_id=self.pool_id,
                        reason="slippage",
                        asset_index=k,
                        amount_out=out,
                        min_amount_out=minimum,
                    )
                    raise SlippageExceeded(f"Asset {k} output {out} below minimum {minimum}")

            balances = tuple(
                (S(b) - out).value for b, out in zip(self._state.balances, amounts_out, strict=True)
            )

            def apply() -> None:
                self._state.set_balances(balances)
                self._state.burn(actor, shares)
                self._state.record_withdrawal(actor, amounts_out)

            self._execute(
                "remove_liquidity",
                inbound=[],
                apply=apply,
                outbound=[(k, actor, out) for k, out in enumerate(amounts_out)],
            )

            logger.info(
                "liquidity_removed",
                pool_id=self.pool_id,
                actor=actor,
                amounts_out=list(amounts_out),
                shares=shares,
            )
            events.append(LiquidityRemoved(actor, amounts_out, shares))
        return amounts_out

    def remove_liquidity_one_token(
        self,
        actor: str,
        shares: int,
        i: int,
        min_amount: int = 0,
    ) -> int:
        """Burn shares for a single asset, paying the imbalance fee.

        Raises:
            IndexOutOfRange, NoLiquidity, InvalidSharesAmount
            SlippageExceeded: If the output is below min_amount
        """
        with self._operation("remove_liquidity_one_token") as events:
            quote = self._quote_withdraw_one(shares, i)
            self._check_burn(actor, shares)
            if quote.amount < min_amount:
                logger.debug(
                    "remove_liquidity_one_token_rejected",
                    pool_id=self.pool_id,
                    reason="slippage",
                    amount_out=quote.amount,
                    min_amount_out=min_amount,
                )
                raise SlippageExceeded(f"Withdrawal {quote.amount} below minimum {min_amount}")

            balances = list(self._state.balances)
            balances[i] = (S(balances[i]) - quote.amount).value
            withdrawn = tuple(quote.amount if k == i else 0 for k in range(N_COINS))

            def apply() -> None:
                self._state.set_balances(tuple(balances))
                self._state.burn(actor, shares)
                self._state.record_withdrawal(actor, withdrawn)

            self._execute(
                "remove_liquidity_one_token",
                inbound=[],
                apply=apply,
                outbound=[(i, actor, quote.amount)],
            )

            logger.info(
                "liquidity_removed_one_token",
                pool_id=self.pool_id,
                actor=actor,
                asset_index=i,
                amount_out=quote.amount,
                fee=quote.fee,
                shares=shares,
            )
            events.append(LiquidityRemovedOneToken(actor, i, quote.amount, shares))
        return quote.amount

    # =========================================================================
    # Read-only views
    # =========================================================================

    def get_dy(self, i: int, j: int, dx: int) -> int:
        """Output of swapping dx of asset i for asset j, after fee."""
        with self._lock:
            return self._quote_swap(i, j, dx).amount_out

    def calc_withdraw_one_token(self, shares: int, i: int) -> WithdrawOneQuote:
        """Amount and fee of burning shares for asset i."""
        with self._lock:
            return self._quote_withdraw_one(shares, i)

    def calc_token_amount(self, amounts: Sequence[int], is_deposit: bool) -> int:
        """Shares minted by depositing, or burned by withdrawing, exact amounts.

        Includes the imbalance fee, so a withdrawal estimate is what an
        imbalanced withdrawal would have to burn.
        """
        with self._lock:
            amounts = _check_amounts(amounts, "amounts")
            if is_deposit:
                return self._quote_deposit(amounts).shares

            total = self._state.total_shares
            if total == 0:
                raise NoLiquidity("Pool has no shares outstanding")
            amp = self.config.amplification
            old_xp = self._xp()
            try:
                new_xp = tuple(
                    (S(x) - normalize_amount(a, m)).value
                    for x, a, m in zip(old_xp, amounts, self.config.multipliers, strict=True)
                )
            except ArithmeticError as err:
                raise InvalidAmount("Withdrawal exceeds pool balance") from err
            d0 = compute_d(old_xp, amp)
            d1 = compute_d(new_xp, amp)
            d2, _ = self._imbalance_adjusted_d(old_xp, new_xp, d0, d1)
            return S(d0).saturating_sub(d2).mul_div(total, d0).value

    def get_virtual_price(self) -> int:
        """Value of one share in normalized units, scaled by 10^18 (0 if empty)."""
        with self._lock:
            total = self._state.total_shares
            if total == 0:
                return 0
            d = compute_d(self._xp(), self.config.amplification)
            return S(d).mul_div(PRECISION, total).value

    def get_invariant(self) -> int:
        with self._lock:
            return compute_d(self._xp(), self.config.amplification)

    def get_balances(self) -> Amounts:
        with self._lock:
            return self._state.balances

    def get_total_shares(self) -> int:
        with self._lock:
            return self._state.total_shares

    def get_shares(self, owner: str) -> int:
        with self._lock:
            return self._state.shares(owner)

    def get_user_deposits(self, owner: str) -> Amounts:
        with self._lock:
            return self._state.deposits(owner)

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return self._state.snapshot()

    def denormalize(self, i: int, value: int) -> int:
        """Convert a normalized value of asset i to raw units, rounding down."""
        check_index(i, "asset index")
        return denormalize_down(value, self.config.multipliers[i])
