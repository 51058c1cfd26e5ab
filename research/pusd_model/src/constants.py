# Fixed point scale factors
PUSD_DECIMALS = 6  # PUSD and canonical USD values carry 6 decimals
PRICE_SCALE = 1_000_000  # 6 decimals for price
BPS_SCALE = 10_000  # Basis points (100% = 10000)
BPS_DENOMINATOR = BPS_SCALE

# Integer widths of the on-chain fields
U16_MAX = 2**16 - 1
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1
I128_MAX = 2**127 - 1

# Oracle constants
DEFAULT_MAX_ORACLE_STALENESS_SECS = 90

# LTV constants
DEFAULT_INITIAL_LTV = 6600       # 66% in bps
DEFAULT_MAINTENANCE_LTV = 6000   # 60% in bps
DEFAULT_LIQ_BONUS = 500          # 5% in bps

# Address seed prefixes
PROTOCOL_SEED = b"protocol"
COLLATERAL_SEED = b"collateral"
POSITION_SEED = b"position"
GOVERNANCE_SEED = b"governance"
