"""Mint PUSD against deposited collateral"""
from dataclasses import dataclass

from ..constants import POSITION_SEED
from ..errors import ErrorCode, ok_or, require
from ..events import Minted
from ..fixed_point import token_amount_to_usd_6dp
from ..risk import check_mint_within_initial_ltv
from ..runtime import Runtime
from ..state.position import Position
from .validation import require_decimals, require_price, require_u64_amount


@dataclass(frozen=True)
class MintPusdAccounts:
    protocol: str
    pusd_mint: str
    collateral_config: str
    vault: str
    position: str
    user_pusd_account: str  # receives the minted PUSD
    owner: str  # signer


def handle_mint(
    runtime: Runtime,
    accounts: MintPusdAccounts,
    mint_pusd_6dp: int,
    collateral_price_usd_6dp: int,
    collateral_decimals: int,
) -> Position:
    """Mint PUSD to the position owner if the new debt stays within initial LTV.

    The collateral price (USD per whole token, 6dp) and the collateral decimals
    are supplied by the caller.
    """
    require_u64_amount(mint_pusd_6dp)
    require_price(collateral_price_usd_6dp)
    require_decimals(collateral_decimals)
    require(mint_pusd_6dp > 0, ErrorCode.ZeroAmount)

    protocol, protocol_signer = runtime.load_protocol(accounts.protocol)
    require(not protocol.mint_paused, ErrorCode.MintPaused)
    require(protocol.pusd_mint == accounts.pusd_mint, ErrorCode.MintMismatch, "pusd_mint")

    cfg, _ = runtime.load_collateral_config(accounts.collateral_config)
    require(cfg.protocol == accounts.protocol, ErrorCode.Unauthorized, "collateral_config.protocol")
    require(cfg.active, ErrorCode.CollateralInactive)
    require(cfg.vault == accounts.vault, ErrorCode.VaultMismatch)

    expected = runtime.derive_address(POSITION_SEED, accounts.owner, cfg.collateral_mint)
    require(accounts.position == expected, ErrorCode.InvalidPda, "position")
    pos = runtime.load_position(accounts.position)
    require(pos.owner == accounts.owner, ErrorCode.Unauthorized, "position owner")
    require(pos.collateral_config == accounts.collateral_config, ErrorCode.UnsupportedCollateral)

    collateral_value_6dp = ok_or(
        token_amount_to_usd_6dp(pos.collateral_amount, collateral_decimals, collateral_price_usd_6dp),
        ErrorCode.MathOverflow,
    )
    within_ltv = check_mint_within_initial_ltv(
        collateral_value_6dp,
        pos.debt_pusd,
        mint_pusd_6dp,
        cfg.initial_ltv_bps,
    )
    require(within_ltv, ErrorCode.LtvExceeded)

    # Aggregate ceilings, global then per collateral
    protocol.add_debt(mint_pusd_6dp)
    cfg.add_debt(mint_pusd_6dp)

    protocol_signer.mint_to(accounts.user_pusd_account, mint_pusd_6dp)

    pos.add_debt(mint_pusd_6dp)
    pos.last_accrual_ts = runtime.now()

    runtime.emit(Minted(
        owner=pos.owner,
        collateral_mint=cfg.collateral_mint,
        minted_pusd_6dp=mint_pusd_6dp,
        new_debt_pusd_6dp=pos.debt_pusd,
    ))
    return pos
