"""Collateral registration and activation"""
from dataclasses import dataclass

from ..constants import COLLATERAL_SEED
from ..errors import ErrorCode, require
from ..events import CollateralAdded, ParameterUpdated
from ..runtime import Runtime
from ..state.collateral import CollateralConfig
from .validation import require_bps, require_u64_amount


@dataclass(frozen=True)
class AddCollateralAccounts:
    protocol: str
    authority: str  # signer, must be the Protocol authority
    collateral_mint: str
    vault: str  # custody account created by the caller, owned by the config identity
    collateral_config: str  # must be derive(["collateral", protocol, collateral_mint])


@dataclass(frozen=True)
class SetCollateralActiveAccounts:
    protocol: str
    authority: str
    collateral_config: str


def handle_add_collateral(
    runtime: Runtime,
    accounts: AddCollateralAccounts,
    initial_ltv_bps: int,
    maintenance_ltv_bps: int,
    liq_bonus_bps: int,
    debt_ceiling: int,
    active: bool,
) -> CollateralConfig:
    """Register a collateral type and its vault"""
    protocol, _ = runtime.load_protocol(accounts.protocol)
    require(protocol.authority == accounts.authority, ErrorCode.Unauthorized)

    for bps in (initial_ltv_bps, maintenance_ltv_bps, liq_bonus_bps):
        require_bps(bps)
    require_u64_amount(debt_ceiling)
    require(initial_ltv_bps > 0 and maintenance_ltv_bps > 0, ErrorCode.InvalidParameter, "LTV must be positive")
    require(
        maintenance_ltv_bps <= initial_ltv_bps,
        ErrorCode.InvalidParameter,
        f"maintenance {maintenance_ltv_bps} > initial {initial_ltv_bps}",
    )

    expected = runtime.derive_address(COLLATERAL_SEED, accounts.protocol, accounts.collateral_mint)
    require(accounts.collateral_config == expected, ErrorCode.InvalidPda, "collateral_config")

    runtime.tokens.get_mint(accounts.collateral_mint)
    vault = runtime.tokens.get_account(accounts.vault)
    require(vault.mint == accounts.collateral_mint, ErrorCode.MintMismatch, "vault")
    require(vault.owner == accounts.collateral_config, ErrorCode.TokenOwnerMismatch, "vault")

    cfg = runtime.store.create(
        accounts.collateral_config,
        CollateralConfig(
            protocol=accounts.protocol,
            collateral_mint=accounts.collateral_mint,
            vault=accounts.vault,
            initial_ltv_bps=initial_ltv_bps,
            maintenance_ltv_bps=maintenance_ltv_bps,
            liq_bonus_bps=liq_bonus_bps,
            debt_ceiling=debt_ceiling,
            active=active,
        ),
    )

    runtime.emit(CollateralAdded(
        protocol=cfg.protocol,
        collateral_mint=cfg.collateral_mint,
        vault=cfg.vault,
        initial_ltv_bps=initial_ltv_bps,
        maintenance_ltv_bps=maintenance_ltv_bps,
        liq_bonus_bps=liq_bonus_bps,
        debt_ceiling=debt_ceiling,
    ))
    return cfg


def handle_set_collateral_active(runtime: Runtime, accounts: SetCollateralActiveAccounts, active: bool) -> None:
    """Enable or disable a collateral type; configs are never deleted"""
    protocol, _ = runtime.load_protocol(accounts.protocol)
    require(protocol.authority == accounts.authority, ErrorCode.Unauthorized)
    cfg, _ = runtime.load_collateral_config(accounts.collateral_config)
    require(cfg.protocol == accounts.protocol, ErrorCode.Unauthorized, "collateral_config.protocol")

    old_value = cfg.active
    cfg.active = active
    runtime.emit(ParameterUpdated(
        protocol=accounts.protocol,
        field="active",
        old_value=int(old_value),
        new_value=int(active),
    ))
