"""Test helpers module for shared test utilities.

- constants: Asset indices, balanced amounts, and actors
- factories: Pool and ledger factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BALANCED_AMOUNTS,
    BALANCED_D,
    BALANCED_XP,
    BOB,
    CAROL,
    EURC,
    FUNDING,
    IDRX,
    ONE_18,
    TENTH_AMOUNTS,
    USDC,
)
from tests.helpers.factories import ScriptedLedger, make_ledgers, make_pool

__all__ = [
    # Constants
    "IDRX",
    "USDC",
    "EURC",
    "ONE_18",
    "BALANCED_XP",
    "BALANCED_D",
    "BALANCED_AMOUNTS",
    "TENTH_AMOUNTS",
    "FUNDING",
    "ALICE",
    "BOB",
    "CAROL",
    # Factories
    "make_pool",
    "make_ledgers",
    "ScriptedLedger",
]
