"""Config loading from YAML + environment"""
import textwrap

import pytest

from pusd_model.src.config import (
    AppConfig,
    CollateralPreset,
    KeeperConfig,
    OracleConfig,
    ProtocolParams,
    load_config,
    validate,
)
from pusd_model.src.constants import DEFAULT_INITIAL_LTV, DEFAULT_MAX_ORACLE_STALENESS_SECS, U64_MAX


def write_config(tmp_path, body):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(body))
    return path


def test_load_config(tmp_path, monkeypatch):
    monkeypatch.setenv("PUSD_LOG_LEVEL", "DEBUG")
    path = write_config(tmp_path, """
        logging:
          level: ${PUSD_LOG_LEVEL}
        oracle:
          max_staleness_secs: 60
        protocol:
          global_debt_ceiling: 5000000000
        collaterals:
          SOL:
            decimals: 9
            initial_ltv_bps: 8000
            maintenance_ltv_bps: 7500
            liq_bonus_bps: 500
            debt_ceiling: 1000000000
          BONK:
            decimals: 5
            active: false
        keeper:
          max_repay_pusd_6dp: 250000000
          interval_secs: 5
    """)

    cfg = load_config(path)

    assert cfg.logging.level == "DEBUG"
    assert cfg.oracle == OracleConfig(max_staleness_secs=60)
    assert cfg.protocol == ProtocolParams(global_debt_ceiling=5_000_000_000)
    assert cfg.collaterals["SOL"] == CollateralPreset(
        decimals=9,
        initial_ltv_bps=8000,
        maintenance_ltv_bps=7500,
        liq_bonus_bps=500,
        debt_ceiling=1_000_000_000,
    )
    bonk = cfg.collaterals["BONK"]
    assert bonk.decimals == 5
    assert bonk.initial_ltv_bps == DEFAULT_INITIAL_LTV
    assert bonk.active is False
    assert cfg.keeper == KeeperConfig(max_repay_pusd_6dp=250_000_000, interval_secs=5)


def test_defaults_for_missing_sections(tmp_path, monkeypatch):
    monkeypatch.delenv("PUSD_LOG_LEVEL", raising=False)
    path = write_config(tmp_path, """
        logging:
          level: ${PUSD_LOG_LEVEL}
    """)
    cfg = load_config(path)
    assert cfg.logging.level == "INFO"
    assert cfg.oracle.max_staleness_secs == DEFAULT_MAX_ORACLE_STALENESS_SECS
    assert cfg.collaterals == {}
    assert cfg.keeper == KeeperConfig()


def test_empty_file_gives_defaults(tmp_path):
    assert load_config(write_config(tmp_path, "")) == AppConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_bundled_config_loads():
    cfg = load_config()
    assert {"SOL", "JITOSOL"} <= set(cfg.collaterals)
    assert cfg.collaterals["SOL"].maintenance_ltv_bps <= cfg.collaterals["SOL"].initial_ltv_bps


@pytest.mark.parametrize(
    "cfg, message",
    [
        (AppConfig(oracle=OracleConfig(max_staleness_secs=0)), "max_staleness_secs"),
        (AppConfig(protocol=ProtocolParams(global_debt_ceiling=U64_MAX + 1)), "global_debt_ceiling"),
        (AppConfig(keeper=KeeperConfig(max_repay_pusd_6dp=-1)), "max_repay"),
        (AppConfig(collaterals={"X": CollateralPreset(decimals=256)}), "decimals"),
        (AppConfig(collaterals={"X": CollateralPreset(initial_ltv_bps=0)}), "positive"),
        (AppConfig(collaterals={"X": CollateralPreset(initial_ltv_bps=5000, maintenance_ltv_bps=6000)}), "exceeds"),
        (AppConfig(collaterals={"X": CollateralPreset(liq_bonus_bps=10_000)}), "bonus"),
        (AppConfig(collaterals={"X": CollateralPreset(debt_ceiling=-1)}), "debt ceiling"),
    ],
)
def test_validate_rejects(cfg, message):
    with pytest.raises(ValueError, match=message):
        validate(cfg)


def test_invalid_file_is_rejected(tmp_path):
    path = write_config(tmp_path, """
        collaterals:
          SOL:
            initial_ltv_bps: 6000
            maintenance_ltv_bps: 7000
    """)
    with pytest.raises(ValueError):
        load_config(path)
