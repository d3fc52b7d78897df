"""Pool constants.

Centralizes the fixed arity, precision, and default asset parameters.
"""

# Number of assets in every pool. The math is written for exactly this arity.
N_COINS = 3

# Normalized balances use 18-decimal fixed point
PRECISION_DECIMALS = 18
PRECISION = 10**PRECISION_DECIMALS

# Swap fee is expressed in parts per million
FEE_DENOMINATOR = 10**6

# Newton-Raphson iteration budget shared by all solvers
MAX_ITERATIONS = 255

# Default pool parameters
DEFAULT_POOL_ID = "idrx-usdc-eurc"
DEFAULT_AMPLIFICATION = 100
DEFAULT_SWAP_FEE = 400  # 0.04%

# Default asset set. IDRX is the reference unit; USDC and EURC carry a fixed
# exchange-rate constant expressed in IDRX per unit.
IDRX_DECIMALS = 2
USDC_DECIMALS = 6
EURC_DECIMALS = 6
DEFAULT_USDC_RATE = 16_000
DEFAULT_EURC_RATE = 17_500
