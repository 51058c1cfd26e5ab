"""Client-side account resolution

Works out the record and token-account keys each instruction needs, the way a
transaction builder would, and wraps the common deploy/user flows. All state
changes still go through `PusdProgram`.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import CollateralPreset
from .constants import COLLATERAL_SEED, POSITION_SEED, PROTOCOL_SEED, PUSD_DECIMALS
from .instructions.add_collateral import AddCollateralAccounts, SetCollateralActiveAccounts
from .instructions.burn import BurnPusdAccounts
from .instructions.initialize import InitializeAccounts
from .instructions.liquidate import LiquidateAccounts
from .instructions.mint import MintPusdAccounts
from .instructions.open_or_fund_position import OpenOrFundPositionAccounts
from .instructions.toggle_pause import TogglePauseAccounts
from .keeper import LiquidatorAccounts
from .program import PusdProgram
from .state.collateral import CollateralConfig
from .state.position import Position
from .state.protocol_config import Protocol

logger = logging.getLogger(__name__)

FAUCET = "faucet"  # mint authority of test collateral assets


@dataclass(frozen=True)
class CollateralHandle:
    symbol: str
    mint: str
    config: str
    vault: str
    decimals: int


@dataclass
class UserHandle:
    name: str
    pusd_account: str
    collateral_accounts: Dict[str, str] = field(default_factory=dict)  # symbol -> token account


class PusdClient:
    def __init__(self, program: PusdProgram, authority: str = "authority", pusd_mint: str = "PUSD") -> None:
        self.program = program
        self.runtime = program.runtime
        self.authority = authority
        self.pusd_mint = pusd_mint
        self.protocol = self.runtime.derive_address(PROTOCOL_SEED, authority)
        self.collaterals: Dict[str, CollateralHandle] = {}
        self.users: Dict[str, UserHandle] = {}

    # ---- deployment ----------------------------------------------------

    def initialize(self, global_debt_ceiling: int, mint_authority: Optional[str] = None) -> Protocol:
        """Create the PUSD mint (authority: the Protocol identity) and initialize"""
        if self.pusd_mint not in self.runtime.tokens.mints:
            self.runtime.tokens.create_mint(self.pusd_mint, PUSD_DECIMALS, mint_authority or self.protocol)
        accounts = InitializeAccounts(protocol=self.protocol, authority=self.authority, pusd_mint=self.pusd_mint)
        return self.program.initialize(accounts, global_debt_ceiling)

    def add_collateral(self, symbol: str, preset: CollateralPreset) -> CollateralHandle:
        mint = f"{symbol}-mint"
        config = self.runtime.derive_address(COLLATERAL_SEED, self.protocol, mint)
        vault = f"{symbol}-vault"
        self.runtime.tokens.create_mint(mint, preset.decimals, FAUCET)
        self.runtime.tokens.create_account(vault, mint, config)

        accounts = AddCollateralAccounts(
            protocol=self.protocol,
            authority=self.authority,
            collateral_mint=mint,
            vault=vault,
            collateral_config=config,
        )
        self.program.add_collateral(
            accounts,
            preset.initial_ltv_bps,
            preset.maintenance_ltv_bps,
            preset.liq_bonus_bps,
            preset.debt_ceiling,
            preset.active,
        )
        handle = CollateralHandle(symbol=symbol, mint=mint, config=config, vault=vault, decimals=preset.decimals)
        self.collaterals[symbol] = handle
        return handle

    def set_collateral_active(self, symbol: str, active: bool) -> None:
        accounts = SetCollateralActiveAccounts(
            protocol=self.protocol,
            authority=self.authority,
            collateral_config=self.collaterals[symbol].config,
        )
        self.program.set_collateral_active(accounts, active)

    def toggle_pause(self, paused: bool) -> None:
        self.program.toggle_pause(TogglePauseAccounts(protocol=self.protocol, authority=self.authority), paused)

    def create_user(self, name: str, airdrop: Optional[Dict[str, int]] = None) -> UserHandle:
        """Token accounts for every registered collateral plus PUSD, funded from the faucet"""
        tokens = self.runtime.tokens
        user = UserHandle(name=name, pusd_account=f"{name}-pusd")
        tokens.create_account(user.pusd_account, self.pusd_mint, name)
        for symbol, handle in self.collaterals.items():
            key = f"{name}-{symbol}"
            tokens.create_account(key, handle.mint, name)
            user.collateral_accounts[symbol] = key
            amount = (airdrop or {}).get(symbol, 0)
            if amount:
                tokens.mint_to(handle.mint, key, FAUCET, amount)
        self.users[name] = user
        return user

    # ---- account resolution --------------------------------------------

    def position_key(self, owner: str, symbol: str) -> str:
        return self.runtime.derive_address(POSITION_SEED, owner, self.collaterals[symbol].mint)

    def position(self, owner: str, symbol: str) -> Position:
        return self.runtime.load_position(self.position_key(owner, symbol))

    def protocol_state(self) -> Protocol:
        return self.runtime.store.load(self.protocol, Protocol)

    def collateral_state(self, symbol: str) -> CollateralConfig:
        return self.runtime.store.load(self.collaterals[symbol].config, CollateralConfig)

    def open_accounts(self, owner: str, symbol: str) -> OpenOrFundPositionAccounts:
        handle = self.collaterals[symbol]
        return OpenOrFundPositionAccounts(
            protocol=self.protocol,
            collateral_mint=handle.mint,
            collateral_config=handle.config,
            user_collateral_account=self.users[owner].collateral_accounts[symbol],
            vault=handle.vault,
            position=self.position_key(owner, symbol),
            owner=owner,
        )

    def mint_accounts(self, owner: str, symbol: str) -> MintPusdAccounts:
        handle = self.collaterals[symbol]
        return MintPusdAccounts(
            protocol=self.protocol,
            pusd_mint=self.pusd_mint,
            collateral_config=handle.config,
            vault=handle.vault,
            position=self.position_key(owner, symbol),
            user_pusd_account=self.users[owner].pusd_account,
            owner=owner,
        )

    def burn_accounts(self, owner: str, symbol: str) -> BurnPusdAccounts:
        handle = self.collaterals[symbol]
        return BurnPusdAccounts(
            protocol=self.protocol,
            pusd_mint=self.pusd_mint,
            collateral_config=handle.config,
            position=self.position_key(owner, symbol),
            user_pusd_account=self.users[owner].pusd_account,
            owner=owner,
        )

    def liquidate_accounts(self, liquidator: str, owner: str, symbol: str) -> LiquidateAccounts:
        handle = self.collaterals[symbol]
        liq = self.users[liquidator]
        return LiquidateAccounts(
            protocol=self.protocol,
            pusd_mint=self.pusd_mint,
            collateral_config=handle.config,
            vault=handle.vault,
            position=self.position_key(owner, symbol),
            liquidator_pusd_account=liq.pusd_account,
            liquidator_collateral_account=liq.collateral_accounts[symbol],
            owner=owner,
            liquidator=liquidator,
        )

    def liquidator_accounts(self, name: str) -> LiquidatorAccounts:
        user = self.users[name]
        return LiquidatorAccounts(
            liquidator=name,
            pusd_account=user.pusd_account,
            collateral_accounts={self.collaterals[s].mint: acct for s, acct in user.collateral_accounts.items()},
        )

    # ---- user flows ----------------------------------------------------

    def deposit(self, owner: str, symbol: str, amount: int) -> Position:
        return self.program.open_or_fund_position(self.open_accounts(owner, symbol), amount)

    def mint(self, owner: str, symbol: str, amount_6dp: int, price_6dp: int) -> Position:
        decimals = self.collaterals[symbol].decimals
        return self.program.mint(self.mint_accounts(owner, symbol), amount_6dp, price_6dp, decimals)

    def burn(self, owner: str, symbol: str, amount_6dp: int) -> Position:
        return self.program.burn(self.burn_accounts(owner, symbol), amount_6dp)

    def liquidate(self, liquidator: str, owner: str, symbol: str, repay_6dp: int, price_6dp: int) -> Position:
        decimals = self.collaterals[symbol].decimals
        accounts = self.liquidate_accounts(liquidator, owner, symbol)
        return self.program.liquidate(accounts, repay_6dp, price_6dp, decimals)
