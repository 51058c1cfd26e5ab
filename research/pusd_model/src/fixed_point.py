"""Fixed point helpers - native token amounts, 6dp USD values and basis points

All values are plain Python integers. Every helper is bounded by an explicit
integer width (u128 unless told otherwise) so results match what the
on-chain program would compute; nothing here ever touches floats.
"""
from typing import Optional

from .constants import U128_MAX

# 10^p for p <= 19, the range realistic token decimals and price exponents use
_POWERS_OF_TEN = tuple(10 ** p for p in range(20))


def ten_pow(p: int) -> int:
    """10^p, saturating at u128::MAX for exponents beyond the table"""
    if p < len(_POWERS_OF_TEN):
        return _POWERS_OF_TEN[p]
    if p > 38:
        # 10^39 already exceeds u128::MAX
        return U128_MAX
    return 10 ** p


def checked_add(a: int, b: int, limit: int = U128_MAX) -> Optional[int]:
    """Add with overflow checking"""
    result = a + b
    if result > limit or result < 0:
        return None
    return result


def checked_sub(a: int, b: int) -> Optional[int]:
    """Subtract with underflow checking (unsigned)"""
    if b > a:
        return None
    return a - b


def checked_mul(a: int, b: int, limit: int = U128_MAX) -> Optional[int]:
    """Multiply with overflow checking"""
    result = a * b
    if result > limit or result < 0:
        return None
    return result


def checked_div(a: int, b: int) -> Optional[int]:
    """Divide with division-by-zero checking"""
    if b == 0:
        return None
    return a // b


def saturating_add(a: int, b: int, limit: int = U128_MAX) -> int:
    return min(a + b, limit)


def saturating_mul(a: int, b: int, limit: int = U128_MAX) -> int:
    return min(a * b, limit)


def saturating_div(a: int, b: int) -> int:
    return a // b


def token_amount_to_usd_6dp(amount: int, token_decimals: int, price_6dp: int) -> Optional[int]:
    """Value of `amount` native units in 6dp USD.

    Args:
        amount: token amount in its smallest units (u64)
        token_decimals: decimals of the token mint
        price_6dp: USD price of one whole token, 6 decimals (u128)

    Returns:
        amount * price_6dp / 10^token_decimals, or None on a zero scale
        factor or multiplication overflow
    """
    denom = ten_pow(token_decimals)
    if denom == 0:
        return None
    product = checked_mul(amount, price_6dp)
    if product is None:
        return None
    return checked_div(product, denom)

