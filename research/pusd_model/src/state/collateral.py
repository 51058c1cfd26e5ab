"""Collateral configuration state management"""
from dataclasses import dataclass

from ..constants import U64_MAX
from ..errors import ErrorCode, ok_or, require
from ..fixed_point import checked_add, checked_sub


@dataclass
class CollateralConfig:
    """Supported collateral type, one per asset and protocol.

    Address seed: ["collateral", protocol, collateral_mint]
    """
    protocol: str
    collateral_mint: str
    vault: str  # custody token account, owned by this config's derived identity
    initial_ltv_bps: int  # e.g. 6600 = 66.00%
    maintenance_ltv_bps: int  # liquidation once health falls below this
    liq_bonus_bps: int  # e.g. 500 = 5.00%
    debt_ceiling: int  # per-collateral ceiling in PUSD, 6dp
    active: bool = True
    bump: int = 0
    total_debt_pusd: int = 0
    total_collateral: int = 0

    def deposit(self, amount: int) -> None:
        """Deposit collateral"""
        self.total_collateral = ok_or(checked_add(self.total_collateral, amount, U64_MAX), ErrorCode.MathOverflow)

    def withdraw(self, amount: int) -> None:
        """Withdraw collateral (only liquidations move collateral out)"""
        self.total_collateral = ok_or(checked_sub(self.total_collateral, amount), ErrorCode.MathUnderflow)

    def add_debt(self, amount: int) -> None:
        new_total = ok_or(checked_add(self.total_debt_pusd, amount, U64_MAX), ErrorCode.MathOverflow)
        require(
            new_total <= self.debt_ceiling,
            ErrorCode.CollateralDebtCeilingReached,
            f"{new_total} > {self.debt_ceiling}",
        )
        self.total_debt_pusd = new_total

    def remove_debt(self, amount: int) -> None:
        self.total_debt_pusd = ok_or(checked_sub(self.total_debt_pusd, amount), ErrorCode.MathUnderflow)
