"""In-memory asset-transfer facility (SPL token style)

Mints carry decimals, a mint authority and total supply; token accounts carry
a mint, an owner identity and a balance. Every operation checks its authority
and balances before touching anything, so a failed call changes nothing.
"""
import logging
from dataclasses import dataclass
from typing import Dict

from .constants import U64_MAX
from .errors import ErrorCode, TokenError, ok_or
from .fixed_point import checked_add

logger = logging.getLogger(__name__)


def _require(condition: bool, code: ErrorCode, detail: str) -> None:
    """Raise TokenError carrying `code` unless `condition` holds"""
    if not condition:
        raise TokenError(code, detail)


@dataclass
class Mint:
    decimals: int
    mint_authority: str
    supply: int = 0


@dataclass
class TokenAccount:
    mint: str
    owner: str
    amount: int = 0


class TokenProgram:
    """Balances and mints keyed by address"""

    def __init__(self) -> None:
        self.mints: Dict[str, Mint] = {}
        self.accounts: Dict[str, TokenAccount] = {}

    # ---- setup -------------------------------------------------------

    def create_mint(self, key: str, decimals: int, mint_authority: str) -> Mint:
        _require(key not in self.mints, ErrorCode.AlreadyInitialized, key)
        mint = Mint(decimals=decimals, mint_authority=mint_authority)
        self.mints[key] = mint
        return mint

    def set_mint_authority(self, key: str, current_authority: str, new_authority: str) -> None:
        mint = self.get_mint(key)
        _require(mint.mint_authority == current_authority, ErrorCode.Unauthorized, key)
        mint.mint_authority = new_authority

    def create_account(self, key: str, mint: str, owner: str) -> TokenAccount:
        _require(key not in self.accounts, ErrorCode.AlreadyInitialized, key)
        self.get_mint(mint)
        account = TokenAccount(mint=mint, owner=owner)
        self.accounts[key] = account
        return account

    # ---- queries -----------------------------------------------------

    def get_mint(self, key: str) -> Mint:
        mint = self.mints.get(key)
        if mint is None:
            raise TokenError(ErrorCode.AccountNotFound, f"mint {key}")
        return mint

    def get_account(self, key: str) -> TokenAccount:
        account = self.accounts.get(key)
        if account is None:
            raise TokenError(ErrorCode.AccountNotFound, f"token account {key}")
        return account

    def balance(self, key: str) -> int:
        return self.get_account(key).amount

    # ---- movements ---------------------------------------------------

    def transfer(self, source: str, dest: str, authority: str, amount: int) -> None:
        """Move `amount` from `source` to `dest`; `authority` must own `source`"""
        src = self.get_account(source)
        dst = self.get_account(dest)
        _require(src.owner == authority, ErrorCode.TokenOwnerMismatch, source)
        _require(src.mint == dst.mint, ErrorCode.MintMismatch, f"{src.mint} != {dst.mint}")
        _require(src.amount >= amount, ErrorCode.InsufficientFunds, f"{src.amount} < {amount}")
        if source != dest:
            new_dest = ok_or(checked_add(dst.amount, amount, U64_MAX), ErrorCode.MathOverflow)
            src.amount -= amount
            dst.amount = new_dest
        logger.debug("transfer %s %s -> %s (%s)", amount, source, dest, src.mint)

    def mint_to(self, mint: str, dest: str, authority: str, amount: int) -> None:
        """Issue new units of `mint` into `dest`; `authority` must be the mint authority"""
        m = self.get_mint(mint)
        dst = self.get_account(dest)
        _require(m.mint_authority == authority, ErrorCode.Unauthorized, f"mint authority of {mint}")
        _require(dst.mint == mint, ErrorCode.MintMismatch, dest)
        new_supply = ok_or(checked_add(m.supply, amount, U64_MAX), ErrorCode.MathOverflow)
        new_dest = ok_or(checked_add(dst.amount, amount, U64_MAX), ErrorCode.MathOverflow)
        m.supply = new_supply
        dst.amount = new_dest
        logger.debug("mint_to %s %s -> %s", amount, mint, dest)

    def burn_from(self, mint: str, source: str, authority: str, amount: int) -> None:
        """Destroy `amount` units held in `source`; `authority` must own `source`"""
        m = self.get_mint(mint)
        src = self.get_account(source)
        _require(src.mint == mint, ErrorCode.MintMismatch, source)
        _require(src.owner == authority, ErrorCode.TokenOwnerMismatch, source)
        _require(src.amount >= amount, ErrorCode.InsufficientFunds, f"{src.amount} < {amount}")
        src.amount -= amount
        m.supply -= amount
        logger.debug("burn %s %s from %s", amount, mint, source)
