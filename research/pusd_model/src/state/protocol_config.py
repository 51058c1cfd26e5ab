"""Protocol configuration and state management"""
from dataclasses import dataclass

from ..constants import U64_MAX
from ..errors import ErrorCode, ok_or, require
from ..fixed_point import checked_add, checked_sub


@dataclass
class Protocol:
    """Program-wide configuration, one per deployment authority.

    Address seed: ["protocol", authority]
    """
    authority: str  # governance / admin identity
    pusd_mint: str  # bound stablecoin asset
    global_debt_ceiling: int  # 6dp
    mint_paused: bool = False
    bump: int = 0
    total_debt_pusd: int = 0  # aggregate outstanding debt, 6dp

    def add_debt(self, amount: int) -> int:
        """Track newly minted debt, enforcing the global ceiling"""
        new_total = ok_or(checked_add(self.total_debt_pusd, amount, U64_MAX), ErrorCode.MathOverflow)
        require(
            new_total <= self.global_debt_ceiling,
            ErrorCode.GlobalDebtCeilingReached,
            f"{new_total} > {self.global_debt_ceiling}",
        )
        self.total_debt_pusd = new_total
        return new_total

    def remove_debt(self, amount: int) -> int:
        """Track repaid debt"""
        self.total_debt_pusd = ok_or(checked_sub(self.total_debt_pusd, amount), ErrorCode.MathUnderflow)
        return self.total_debt_pusd
