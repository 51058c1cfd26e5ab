"""Range checks for raw instruction arguments

Arguments arrive as Python ints; these reject anything the on-chain argument
types (u8/u16/u64/u128) could not have carried.
"""
from ..constants import U16_MAX, U64_MAX, U128_MAX
from ..errors import ErrorCode, require


def require_u64_amount(amount: int) -> None:
    require(0 <= amount <= U64_MAX, ErrorCode.InvalidAmount, f"{amount} is not a u64")


def require_bps(value: int) -> None:
    require(0 <= value <= U16_MAX, ErrorCode.InvalidParameter, f"{value} is not a u16")


def require_price(price_6dp: int) -> None:
    require(0 <= price_6dp <= U128_MAX, ErrorCode.PriceOutOfBounds, f"{price_6dp}")


def require_decimals(decimals: int) -> None:
    require(0 <= decimals <= 255, ErrorCode.InvalidParameter, f"{decimals} is not a u8")
