"""Burn/repay PUSD"""
from dataclasses import dataclass

from ..constants import POSITION_SEED
from ..errors import ErrorCode, require
from ..events import Burned
from ..runtime import Runtime
from ..state.position import Position
from .validation import require_u64_amount


@dataclass(frozen=True)
class BurnPusdAccounts:
    protocol: str
    pusd_mint: str
    collateral_config: str
    position: str
    user_pusd_account: str  # PUSD to burn, owned by `owner`
    owner: str  # signer


def handle_burn(runtime: Runtime, accounts: BurnPusdAccounts, burn_pusd_6dp: int) -> Position:
    """Repay position debt by burning the owner's PUSD.

    Repaying more than the outstanding debt fails with MathUnderflow; nothing
    is clamped. Collateral stays in the vault.
    """
    require_u64_amount(burn_pusd_6dp)
    require(burn_pusd_6dp > 0, ErrorCode.ZeroAmount)

    protocol, _ = runtime.load_protocol(accounts.protocol)
    require(protocol.pusd_mint == accounts.pusd_mint, ErrorCode.MintMismatch, "pusd_mint")
    cfg, _ = runtime.load_collateral_config(accounts.collateral_config)
    require(cfg.protocol == accounts.protocol, ErrorCode.Unauthorized, "collateral_config.protocol")

    expected = runtime.derive_address(POSITION_SEED, accounts.owner, cfg.collateral_mint)
    require(accounts.position == expected, ErrorCode.InvalidPda, "position")
    pos = runtime.load_position(accounts.position)

    # Take the PUSD out of circulation before reducing the debt
    runtime.tokens.burn_from(accounts.pusd_mint, accounts.user_pusd_account, accounts.owner, burn_pusd_6dp)

    require(pos.owner == accounts.owner, ErrorCode.Unauthorized, "position owner")
    pos.remove_debt(burn_pusd_6dp)
    pos.last_accrual_ts = runtime.now()
    cfg.remove_debt(burn_pusd_6dp)
    protocol.remove_debt(burn_pusd_6dp)

    runtime.emit(Burned(
        owner=pos.owner,
        collateral_mint=cfg.collateral_mint,
        burned_pusd_6dp=burn_pusd_6dp,
        new_debt_pusd_6dp=pos.debt_pusd,
    ))
    return pos
