"""PUSD program entry points

Each entry point runs its handler inside `Runtime.atomic()`, so a failed
check, checked-arithmetic failure or failed token movement leaves no trace.
"""
import logging
from typing import Optional

from .instructions.add_collateral import (
    AddCollateralAccounts,
    SetCollateralActiveAccounts,
    handle_add_collateral,
    handle_set_collateral_active,
)
from .instructions.burn import BurnPusdAccounts, handle_burn
from .instructions.initialize import InitializeAccounts, handle_initialize
from .instructions.liquidate import LiquidateAccounts, handle_liquidate
from .instructions.mint import MintPusdAccounts, handle_mint
from .instructions.open_or_fund_position import OpenOrFundPositionAccounts, handle_open_or_fund_position
from .instructions.toggle_pause import TogglePauseAccounts, handle_toggle_pause
from .runtime import Runtime
from .state.collateral import CollateralConfig
from .state.position import Position
from .state.protocol_config import Protocol

logger = logging.getLogger(__name__)


class PusdProgram:
    def __init__(self, runtime: Optional[Runtime] = None) -> None:
        self.runtime = runtime if runtime is not None else Runtime()

    def initialize(self, accounts: InitializeAccounts, global_debt_ceiling: int) -> Protocol:
        """Initialize the protocol and bind the PUSD mint."""
        with self.runtime.atomic("initialize"):
            protocol = handle_initialize(self.runtime, accounts, global_debt_ceiling)
        logger.info("Initialized protocol %s (debt ceiling %s)", accounts.protocol, global_debt_ceiling)
        return protocol

    def add_collateral(
        self,
        accounts: AddCollateralAccounts,
        initial_ltv_bps: int,
        maintenance_ltv_bps: int,
        liq_bonus_bps: int,
        debt_ceiling: int,
        active: bool,
    ) -> CollateralConfig:
        """Register a collateral type and its vault."""
        with self.runtime.atomic("add_collateral"):
            cfg = handle_add_collateral(
                self.runtime,
                accounts,
                initial_ltv_bps,
                maintenance_ltv_bps,
                liq_bonus_bps,
                debt_ceiling,
                active,
            )
        logger.info(
            "Added collateral %s (initial %s bps, maintenance %s bps, bonus %s bps)",
            accounts.collateral_mint, initial_ltv_bps, maintenance_ltv_bps, liq_bonus_bps,
        )
        return cfg

    def set_collateral_active(self, accounts: SetCollateralActiveAccounts, active: bool) -> None:
        with self.runtime.atomic("set_collateral_active"):
            handle_set_collateral_active(self.runtime, accounts, active)
        logger.info("Collateral %s active=%s", accounts.collateral_config, active)

    def open_or_fund_position(self, accounts: OpenOrFundPositionAccounts, deposit_amount: int) -> Position:
        """Create (if needed) or fund a position by depositing collateral."""
        with self.runtime.atomic("open_or_fund_position"):
            pos = handle_open_or_fund_position(self.runtime, accounts, deposit_amount)
        logger.info("Deposited %s into position %s", deposit_amount, accounts.position)
        return pos

    def mint(
        self,
        accounts: MintPusdAccounts,
        mint_pusd_6dp: int,
        collateral_price_usd_6dp: int,
        collateral_decimals: int,
    ) -> Position:
        """Mint PUSD against deposited collateral."""
        with self.runtime.atomic("mint"):
            pos = handle_mint(self.runtime, accounts, mint_pusd_6dp, collateral_price_usd_6dp, collateral_decimals)
        logger.info("Minted %s PUSD for %s (debt now %s)", mint_pusd_6dp, accounts.owner, pos.debt_pusd)
        return pos

    def burn(self, accounts: BurnPusdAccounts, burn_pusd_6dp: int) -> Position:
        """Burn/repay PUSD."""
        with self.runtime.atomic("burn"):
            pos = handle_burn(self.runtime, accounts, burn_pusd_6dp)
        logger.info("Burned %s PUSD for %s (debt now %s)", burn_pusd_6dp, accounts.owner, pos.debt_pusd)
        return pos

    def liquidate(
        self,
        accounts: LiquidateAccounts,
        repay_pusd_6dp: int,
        collateral_price_usd_6dp: int,
        collateral_decimals: int,
    ) -> Position:
        """Liquidate an unhealthy position."""
        with self.runtime.atomic("liquidate"):
            pos = handle_liquidate(
                self.runtime, accounts, repay_pusd_6dp, collateral_price_usd_6dp, collateral_decimals
            )
        logger.info(
            "Liquidated position %s of %s (debt now %s, collateral now %s)",
            accounts.position, accounts.owner, pos.debt_pusd, pos.collateral_amount,
        )
        return pos

    def toggle_pause(self, accounts: TogglePauseAccounts, paused: bool) -> None:
        """Emergency pause/unpause minting."""
        with self.runtime.atomic("toggle_pause"):
            handle_toggle_pause(self.runtime, accounts, paused)
        logger.info("Protocol %s mint_paused=%s", accounts.protocol, paused)
