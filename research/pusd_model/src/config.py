"""Configuration loader - reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    BPS_SCALE,
    DEFAULT_INITIAL_LTV,
    DEFAULT_LIQ_BONUS,
    DEFAULT_MAINTENANCE_LTV,
    DEFAULT_MAX_ORACLE_STALENESS_SECS,
    U16_MAX,
    U64_MAX,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class OracleConfig:
    max_staleness_secs: int = DEFAULT_MAX_ORACLE_STALENESS_SECS


@dataclass(frozen=True)
class ProtocolParams:
    global_debt_ceiling: int = 10_000_000 * 1_000_000  # 10M PUSD, 6dp


@dataclass(frozen=True)
class CollateralPreset:
    decimals: int = 9
    initial_ltv_bps: int = DEFAULT_INITIAL_LTV
    maintenance_ltv_bps: int = DEFAULT_MAINTENANCE_LTV
    liq_bonus_bps: int = DEFAULT_LIQ_BONUS
    debt_ceiling: int = 1_000_000 * 1_000_000  # 1M PUSD, 6dp
    active: bool = True


@dataclass(frozen=True)
class KeeperConfig:
    max_repay_pusd_6dp: int = 0  # 0 repays the whole debt
    interval_secs: int = 30


@dataclass(frozen=True)
class AppConfig:
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)
    protocol: ProtocolParams = field(default_factory=ProtocolParams)
    collaterals: dict[str, CollateralPreset] = field(default_factory=dict)
    keeper: KeeperConfig = field(default_factory=KeeperConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML -> dataclass builders
# ---------------------------------------------------------------------------


def _build_collaterals(raw: dict[str, Any]) -> dict[str, CollateralPreset]:
    presets: dict[str, CollateralPreset] = {}
    for symbol, cfg in raw.items():
        presets[symbol] = CollateralPreset(
            decimals=int(cfg.get("decimals", 9)),
            initial_ltv_bps=int(cfg.get("initial_ltv_bps", DEFAULT_INITIAL_LTV)),
            maintenance_ltv_bps=int(cfg.get("maintenance_ltv_bps", DEFAULT_MAINTENANCE_LTV)),
            liq_bonus_bps=int(cfg.get("liq_bonus_bps", DEFAULT_LIQ_BONUS)),
            debt_ceiling=int(cfg.get("debt_ceiling", CollateralPreset.debt_ceiling)),
            active=bool(cfg.get("active", True)),
        )
    return presets


def _build(raw: dict[str, Any]) -> AppConfig:
    log_raw = raw.get("logging", {})
    oracle_raw = raw.get("oracle", {})
    protocol_raw = raw.get("protocol", {})
    keeper_raw = raw.get("keeper", {})
    return AppConfig(
        logging=LoggingConfig(level=str(log_raw.get("level") or "INFO")),
        oracle=OracleConfig(
            max_staleness_secs=int(oracle_raw.get("max_staleness_secs", DEFAULT_MAX_ORACLE_STALENESS_SECS)),
        ),
        protocol=ProtocolParams(
            global_debt_ceiling=int(protocol_raw.get("global_debt_ceiling", ProtocolParams.global_debt_ceiling)),
        ),
        collaterals=_build_collaterals(raw.get("collaterals", {})),
        keeper=KeeperConfig(
            max_repay_pusd_6dp=int(keeper_raw.get("max_repay_pusd_6dp", 0)),
            interval_secs=int(keeper_raw.get("interval_secs", 30)),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``research/config.yaml``.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    cfg = _build(_interpolate_env(raw))
    validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.oracle.max_staleness_secs <= 0:
        raise ValueError("oracle.max_staleness_secs must be positive")
    if not 0 <= cfg.protocol.global_debt_ceiling <= U64_MAX:
        raise ValueError("protocol.global_debt_ceiling must fit in a u64")
    if cfg.keeper.max_repay_pusd_6dp < 0:
        raise ValueError("keeper.max_repay_pusd_6dp must not be negative")

    for symbol, preset in cfg.collaterals.items():
        if not 0 <= preset.decimals <= 255:
            raise ValueError(f"Collateral '{symbol}' decimals out of range")
        if preset.initial_ltv_bps <= 0 or preset.maintenance_ltv_bps <= 0:
            raise ValueError(f"Collateral '{symbol}' LTV values must be positive")
        if preset.maintenance_ltv_bps > preset.initial_ltv_bps:
            raise ValueError(
                f"Collateral '{symbol}' maintenance LTV exceeds initial LTV"
            )
        if max(preset.initial_ltv_bps, preset.liq_bonus_bps) > U16_MAX:
            raise ValueError(f"Collateral '{symbol}' bps values must fit in a u16")
        if preset.liq_bonus_bps >= BPS_SCALE:
            raise ValueError(f"Collateral '{symbol}' liquidation bonus must be below 100%")
        if not 0 <= preset.debt_ceiling <= U64_MAX:
            raise ValueError(f"Collateral '{symbol}' debt ceiling must fit in a u64")
