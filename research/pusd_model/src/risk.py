"""Health and loan-to-value checks

Pure functions over plain integers. None of them raise: out-of-range products
saturate at u128::MAX, matching the on-chain program.
"""
from typing import Optional

from .constants import BPS_DENOMINATOR, U128_MAX
from .fixed_point import (
    checked_div,
    checked_mul,
    saturating_add,
    saturating_div,
    saturating_mul,
)


def compute_health_bps(collateral_value_6dp: int, debt_6dp: int) -> int:
    """Health in basis points: collateral_value / debt * 10_000.

    Returns u128::MAX (infinite health) when there is no debt.
    """
    if debt_6dp == 0:
        return U128_MAX
    return saturating_div(saturating_mul(collateral_value_6dp, BPS_DENOMINATOR), debt_6dp)


def check_mint_within_initial_ltv(
    collateral_value_6dp: int,
    current_debt_6dp: int,
    mint_delta_6dp: int,
    initial_ltv_bps: int,
) -> bool:
    """True if minting `mint_delta_6dp` more keeps debt within the initial LTV"""
    new_debt = saturating_add(current_debt_6dp, mint_delta_6dp)
    if collateral_value_6dp == 0:
        return False
    # debt * 10_000 <= collateral * LTV_bps
    return (
        saturating_mul(new_debt, BPS_DENOMINATOR)
        <= saturating_mul(collateral_value_6dp, initial_ltv_bps)
    )


def is_above_maintenance(collateral_value_6dp: int, debt_6dp: int, maintenance_ltv_bps: int) -> bool:
    """True if the position is healthy, i.e. not liquidatable"""
    return compute_health_bps(collateral_value_6dp, debt_6dp) >= maintenance_ltv_bps


def apply_liquidation_bonus_bps(base_amount: int, bonus_bps: int) -> Optional[int]:
    """base_amount * (1 + bonus_bps / 10_000), None on overflow"""
    num = saturating_add(BPS_DENOMINATOR, bonus_bps)
    product = checked_mul(base_amount, num)
    if product is None:
        return None
    return checked_div(product, BPS_DENOMINATOR)
