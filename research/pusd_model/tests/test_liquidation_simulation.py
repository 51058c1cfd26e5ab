"""Smoke tests for the research simulation"""
import pytest

from liquidation_simulation import LiquidationSimulation, SimulationParams
from pusd_model.src.config import AppConfig, CollateralPreset


@pytest.fixture()
def sim():
    params = SimulationParams(
        num_positions=5,
        simulation_days=2,
        steps_per_day=4,
        random_seed=3,
        experiment_name="smoke",
    )
    return LiquidationSimulation(params, AppConfig(collaterals={"SOL": CollateralPreset()}))


def test_deploy_opens_every_position(sim):
    positions = list(sim.runtime.store.positions())
    # five users plus the liquidator
    assert len(positions) == 6
    assert all(pos.debt_pusd > 0 for _, pos in positions)


def test_simulate_produces_history(sim):
    df = sim.simulate()
    assert len(df) == 8
    assert {"day", "price", "total_debt", "liquidations", "min_health_bps", "cumulative_repaid"} <= set(df.columns)
    # no new debt is minted during the run
    assert df["total_debt"].is_monotonic_decreasing


def test_crash_liquidates_every_user(sim):
    results = sim.keeper.run_once({sim.client.collaterals["SOL"].mint: sim._oracle_price(20.0)}, sim.now)
    assert sorted(r.owner for r in results) == [f"user{i}" for i in range(5)]
    assert sim.client.protocol_state().total_debt_pusd == sim.client.position("liquidator", "SOL").debt_pusd


def test_plot_results_writes_files(sim, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    sim.simulate()
    sim.plot_results()
    out = tmp_path / "research" / "results" / "smoke"
    assert len(list(out.glob("*.png"))) == 1
    assert len(list(out.glob("*.csv"))) == 1
