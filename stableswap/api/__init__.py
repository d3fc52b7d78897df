"""HTTP API for StableSwap pools."""
