"""Position state management"""
from dataclasses import dataclass

from ..constants import U64_MAX
from ..errors import ErrorCode, ok_or
from ..fixed_point import checked_add, checked_sub


@dataclass
class Position:
    """User position per collateral mint (simple 1:1 model).

    Address seed: ["position", owner, collateral_mint]
    """
    owner: str
    collateral_config: str  # fixed after the first deposit
    collateral_amount: int = 0  # u64, smallest collateral units
    debt_pusd: int = 0  # u64, 6dp
    last_accrual_ts: int = 0
    bump: int = 0

    def add_collateral(self, amount: int) -> None:
        self.collateral_amount = ok_or(
            checked_add(self.collateral_amount, amount, U64_MAX), ErrorCode.MathOverflow
        )

    def remove_collateral(self, amount: int) -> None:
        self.collateral_amount = ok_or(checked_sub(self.collateral_amount, amount), ErrorCode.MathUnderflow)

    def add_debt(self, amount: int) -> None:
        self.debt_pusd = ok_or(checked_add(self.debt_pusd, amount, U64_MAX), ErrorCode.MathOverflow)

    def remove_debt(self, amount: int) -> None:
        """Repay debt; over-repayment fails rather than clamping"""
        self.debt_pusd = ok_or(checked_sub(self.debt_pusd, amount), ErrorCode.MathUnderflow)
