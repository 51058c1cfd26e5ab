"""Collateral deposits"""
from dataclasses import dataclass

from ..constants import POSITION_SEED
from ..errors import ErrorCode, require
from ..runtime import Runtime
from ..state.position import Position
from .validation import require_u64_amount


@dataclass(frozen=True)
class OpenOrFundPositionAccounts:
    protocol: str
    collateral_mint: str
    collateral_config: str
    user_collateral_account: str  # source of the deposit, owned by `owner`
    vault: str
    position: str  # derive(["position", owner, collateral_mint])
    owner: str  # signer


def handle_open_or_fund_position(
    runtime: Runtime,
    accounts: OpenOrFundPositionAccounts,
    deposit_amount: int,
) -> Position:
    """Create the position on first deposit, otherwise top up its collateral"""
    require_u64_amount(deposit_amount)
    require(deposit_amount > 0, ErrorCode.ZeroAmount)

    cfg, _ = runtime.load_collateral_config(accounts.collateral_config)
    require(cfg.protocol == accounts.protocol, ErrorCode.Unauthorized, "collateral_config.protocol")
    require(cfg.collateral_mint == accounts.collateral_mint, ErrorCode.MintMismatch, "collateral_mint")
    require(cfg.vault == accounts.vault, ErrorCode.VaultMismatch)
    require(cfg.active, ErrorCode.CollateralInactive)

    expected = runtime.derive_address(POSITION_SEED, accounts.owner, accounts.collateral_mint)
    require(accounts.position == expected, ErrorCode.InvalidPda, "position")

    # Move the collateral into custody before recording it
    runtime.tokens.transfer(accounts.user_collateral_account, accounts.vault, accounts.owner, deposit_amount)

    pos = runtime.store.get(accounts.position, Position)
    if pos is None:
        pos = runtime.store.create(
            accounts.position,
            Position(
                owner=accounts.owner,
                collateral_config=accounts.collateral_config,
                collateral_amount=deposit_amount,
                debt_pusd=0,
                last_accrual_ts=runtime.now(),
            ),
        )
    else:
        require(pos.owner == accounts.owner, ErrorCode.Unauthorized, "position owner")
        require(pos.collateral_config == accounts.collateral_config, ErrorCode.UnsupportedCollateral)
        pos.add_collateral(deposit_amount)

    cfg.deposit(deposit_amount)
    return pos
