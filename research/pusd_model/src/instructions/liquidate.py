"""Liquidate an unhealthy position"""
from dataclasses import dataclass

from ..constants import POSITION_SEED, U64_MAX
from ..errors import ErrorCode, ok_or, require
from ..events import Liquidated
from ..fixed_point import checked_div, checked_mul, ten_pow, token_amount_to_usd_6dp
from ..risk import apply_liquidation_bonus_bps, is_above_maintenance
from ..runtime import Runtime
from ..state.position import Position
from .validation import require_decimals, require_price, require_u64_amount


@dataclass(frozen=True)
class LiquidateAccounts:
    protocol: str
    pusd_mint: str
    collateral_config: str
    vault: str
    position: str
    liquidator_pusd_account: str  # PUSD burned to repay the debt
    liquidator_collateral_account: str  # receives the seized collateral
    owner: str  # position owner, used to locate the position
    liquidator: str  # signer


def handle_liquidate(
    runtime: Runtime,
    accounts: LiquidateAccounts,
    repay_pusd_6dp: int,
    collateral_price_usd_6dp: int,
    collateral_decimals: int,
) -> Position:
    """Repay debt of a position below maintenance for bonus-inflated collateral.

    The repay amount is capped at the outstanding debt and the seized
    collateral at the position's collateral; those are the only two clamps.
    """
    require_u64_amount(repay_pusd_6dp)
    require_price(collateral_price_usd_6dp)
    require_decimals(collateral_decimals)
    require(repay_pusd_6dp > 0, ErrorCode.ZeroAmount)

    protocol, _ = runtime.load_protocol(accounts.protocol)
    require(protocol.pusd_mint == accounts.pusd_mint, ErrorCode.MintMismatch, "pusd_mint")
    cfg, collateral_signer = runtime.load_collateral_config(accounts.collateral_config)
    require(cfg.protocol == accounts.protocol, ErrorCode.Unauthorized, "collateral_config.protocol")
    require(cfg.vault == accounts.vault, ErrorCode.VaultMismatch)

    expected = runtime.derive_address(POSITION_SEED, accounts.owner, cfg.collateral_mint)
    require(accounts.position == expected, ErrorCode.InvalidPda, "position")
    pos = runtime.load_position(accounts.position)

    # Liquidatable only when health is strictly below maintenance
    collateral_value_6dp = ok_or(
        token_amount_to_usd_6dp(pos.collateral_amount, collateral_decimals, collateral_price_usd_6dp),
        ErrorCode.MathOverflow,
    )
    healthy = is_above_maintenance(collateral_value_6dp, pos.debt_pusd, cfg.maintenance_ltv_bps)
    require(not healthy, ErrorCode.NotLiquidatable)

    repay = min(repay_pusd_6dp, pos.debt_pusd)

    # Burn the liquidator's PUSD first
    runtime.tokens.burn_from(accounts.pusd_mint, accounts.liquidator_pusd_account, accounts.liquidator, repay)

    # Inverse pricing: tokens = repay * 10^decimals / price
    require(collateral_price_usd_6dp > 0, ErrorCode.PriceOutOfBounds)
    num = ok_or(checked_mul(repay, ten_pow(collateral_decimals)), ErrorCode.MathOverflow)
    base_tokens = ok_or(checked_div(num, collateral_price_usd_6dp), ErrorCode.DivisionByZero)
    seized_with_bonus = ok_or(apply_liquidation_bonus_bps(base_tokens, cfg.liq_bonus_bps), ErrorCode.MathOverflow)
    require(seized_with_bonus <= U64_MAX, ErrorCode.InvalidAmount, "seize amount exceeds u64")

    seize_amount = min(seized_with_bonus, pos.collateral_amount)
    require(seize_amount > 0, ErrorCode.InvalidAmount, "nothing to seize")

    collateral_signer.transfer_from_vault(accounts.liquidator_collateral_account, seize_amount)

    pos.remove_collateral(seize_amount)
    pos.remove_debt(repay)
    cfg.withdraw(seize_amount)
    cfg.remove_debt(repay)
    protocol.remove_debt(repay)

    runtime.emit(Liquidated(
        liquidator=accounts.liquidator,
        owner=pos.owner,
        collateral_mint=cfg.collateral_mint,
        repaid_pusd_6dp=repay,
        seized_collateral_amount=seize_amount,
    ))
    return pos
