"""Fee schedule for pool operations."""

from stableswap.fees.model import FeeModel

__all__ = ["FeeModel"]
