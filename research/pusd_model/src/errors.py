"""Custom errors for the protocol model"""
from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Error kinds surfaced by protocol operations, with their messages"""

    # Access / auth
    Unauthorized = "Unauthorized: caller is not the required authority."
    InvalidPda = "Invalid derived account address."
    TimelockNotElapsed = "Governance timelock has not elapsed."

    # Params / config
    MintPaused = "Protocol minting is currently paused."
    CollateralInactive = "Collateral type is not active."
    UnsupportedCollateral = "Unsupported collateral mint."
    GlobalDebtCeilingReached = "Global debt ceiling reached."
    CollateralDebtCeilingReached = "Per-collateral debt ceiling reached."
    InvalidParameter = "Parameter out of allowed bounds."

    # Amounts / math
    ZeroAmount = "Amount must be greater than zero."
    InvalidAmount = "Invalid amount."
    MathOverflow = "Overflow during arithmetic operation."
    MathUnderflow = "Underflow during arithmetic operation."
    DivisionByZero = "Division by zero."

    # Accounts / position / vault
    AlreadyInitialized = "Account already initialized."
    AccountNotFound = "Account not found."
    PositionAlreadyExists = "Position already exists."
    PositionNotFound = "Position not found."
    InsufficientCollateral = "Insufficient collateral for this operation."
    LtvExceeded = "LTV would exceed initial limit."
    HealthBelowMaintenance = "Health below maintenance threshold; action not allowed."
    VaultMismatch = "Provided vault account does not match config."

    # Liquidation
    NotLiquidatable = "Position is not eligible for liquidation."
    LiquidationTooLarge = "Requested liquidation amount is too large."
    SlippageExceeded = "Slippage or price impact exceeded limits."

    # Oracles / pricing
    InvalidOracle = "Oracle account(s) invalid or missing."
    OracleStale = "Oracle price is stale."
    PriceOutOfBounds = "Oracle price out of acceptable bounds."

    # Token facility
    MintMismatch = "Token mint does not match expected mint."
    TokenOwnerMismatch = "Token account owner mismatch."
    InsufficientFunds = "Insufficient token balance."

    @property
    def message(self) -> str:
        return self.value


class ProtocolError(Exception):
    """Base error class for protocol errors"""

    def __init__(self, code: ErrorCode, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        message = code.message if detail is None else f"{code.message} ({detail})"
        super().__init__(message)


class UnauthorizedError(ProtocolError):
    """Error for a caller that is not the declared owner or authority"""
    pass


class AccountMismatchError(ProtocolError):
    """Error for a supplied account that is not the expected derived identity or config"""
    pass


class InvalidParameterError(ProtocolError):
    """Error for out-of-bounds configuration parameters"""
    pass


class InvalidAmountError(ProtocolError):
    """Error for zero, invalid or unavailable amounts"""
    pass


class MathError(ProtocolError):
    """Error for arithmetic overflow/underflow/division by zero"""
    pass


class MintPausedError(ProtocolError):
    """Error for minting while the protocol is paused"""
    pass


class InvalidCollateralError(ProtocolError):
    """Error for invalid collateral operations"""
    pass


class InvalidPositionError(ProtocolError):
    """Error for invalid position or account state"""
    pass


class ExcessiveDebtError(ProtocolError):
    """Error for excessive debt"""
    pass


class LiquidationError(ProtocolError):
    """Error for liquidation eligibility"""
    pass


class InvalidPriceError(ProtocolError):
    """Error for invalid or stale price data"""
    pass


class TokenError(ProtocolError):
    """Error raised by the asset-transfer facility"""
    pass


_ERROR_CLASSES = {
    ErrorCode.Unauthorized: UnauthorizedError,
    ErrorCode.TimelockNotElapsed: UnauthorizedError,
    ErrorCode.InvalidPda: AccountMismatchError,
    ErrorCode.VaultMismatch: AccountMismatchError,
    ErrorCode.UnsupportedCollateral: AccountMismatchError,
    ErrorCode.MintMismatch: AccountMismatchError,
    ErrorCode.InvalidParameter: InvalidParameterError,
    ErrorCode.ZeroAmount: InvalidAmountError,
    ErrorCode.InvalidAmount: InvalidAmountError,
    ErrorCode.InsufficientCollateral: InvalidAmountError,
    ErrorCode.MathOverflow: MathError,
    ErrorCode.MathUnderflow: MathError,
    ErrorCode.DivisionByZero: MathError,
    ErrorCode.MintPaused: MintPausedError,
    ErrorCode.CollateralInactive: InvalidCollateralError,
    ErrorCode.AlreadyInitialized: InvalidPositionError,
    ErrorCode.AccountNotFound: InvalidPositionError,
    ErrorCode.PositionAlreadyExists: InvalidPositionError,
    ErrorCode.PositionNotFound: InvalidPositionError,
    ErrorCode.LtvExceeded: ExcessiveDebtError,
    ErrorCode.GlobalDebtCeilingReached: ExcessiveDebtError,
    ErrorCode.CollateralDebtCeilingReached: ExcessiveDebtError,
    ErrorCode.HealthBelowMaintenance: ExcessiveDebtError,
    ErrorCode.NotLiquidatable: LiquidationError,
    ErrorCode.LiquidationTooLarge: LiquidationError,
    ErrorCode.SlippageExceeded: LiquidationError,
    ErrorCode.InvalidOracle: InvalidPriceError,
    ErrorCode.OracleStale: InvalidPriceError,
    ErrorCode.PriceOutOfBounds: InvalidPriceError,
    ErrorCode.TokenOwnerMismatch: TokenError,
    ErrorCode.InsufficientFunds: TokenError,
}


def error_for(code: ErrorCode, detail: Optional[str] = None) -> ProtocolError:
    """Build the exception instance matching an error code"""
    return _ERROR_CLASSES.get(code, ProtocolError)(code, detail)


def require(condition: bool, code: ErrorCode, detail: Optional[str] = None) -> None:
    """Raise the error mapped to `code` unless `condition` holds"""
    if not condition:
        raise error_for(code, detail)


def ok_or(value: Optional[int], code: ErrorCode) -> int:
    """Unwrap a checked arithmetic result, raising `code` when it is None"""
    if value is None:
        raise error_for(code)
    return value
