"""Events emitted by protocol operations"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Initialized:
    protocol: str
    pusd_mint: str
    authority: str
    global_debt_ceiling: int


@dataclass(frozen=True)
class CollateralAdded:
    protocol: str
    collateral_mint: str
    vault: str
    initial_ltv_bps: int
    maintenance_ltv_bps: int
    liq_bonus_bps: int
    debt_ceiling: int


@dataclass(frozen=True)
class Minted:
    owner: str
    collateral_mint: str
    minted_pusd_6dp: int
    new_debt_pusd_6dp: int


@dataclass(frozen=True)
class Burned:
    owner: str
    collateral_mint: str
    burned_pusd_6dp: int
    new_debt_pusd_6dp: int


@dataclass(frozen=True)
class Liquidated:
    liquidator: str
    owner: str
    collateral_mint: str
    repaid_pusd_6dp: int
    seized_collateral_amount: int


@dataclass(frozen=True)
class PauseToggled:
    protocol: str
    paused: bool


@dataclass(frozen=True)
class ParameterUpdated:
    protocol: str
    field: str  # short label, e.g. "active"
    old_value: int
    new_value: int
