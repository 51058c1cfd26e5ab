import numpy as np
import matplotlib.pyplot as plt
import pandas as pd
from dataclasses import dataclass
from typing import List, Optional
from pathlib import Path
from datetime import datetime

from pusd_model.src.client import PusdClient
from pusd_model.src.config import AppConfig, CollateralPreset, load_config
from pusd_model.src.constants import PRICE_SCALE
from pusd_model.src.keeper import Keeper
from pusd_model.src.logging_setup import configure_logging
from pusd_model.src.oracle import OraclePrice
from pusd_model.src.program import PusdProgram
from pusd_model.src.runtime import Runtime

# Oracle prices are published with 8 decimals, like most Pyth USD feeds
ORACLE_EXPO = -8


@dataclass
class SimulationParams:
    initial_price: float = 150.0  # USD per whole collateral token
    price_volatility: float = 0.01  # per step
    simulation_days: int = 90
    steps_per_day: int = 24  # hourly steps
    num_positions: int = 50
    min_deposit: float = 10.0  # whole tokens
    max_deposit: float = 100.0
    min_utilization: float = 0.5  # fraction of the initial-LTV headroom minted
    max_utilization: float = 0.98
    random_seed: Optional[int] = None
    experiment_name: str = "default"
    collateral_symbol: str = "SOL"


class LiquidationSimulation:
    """Random-walk the collateral price and let the keeper liquidate what breaks"""

    def __init__(self, params: SimulationParams, config: AppConfig):
        self.params = params
        self.config = config
        self.preset = config.collaterals.get(params.collateral_symbol, CollateralPreset())
        self.now = 1_700_000_000
        self.history: Optional[pd.DataFrame] = None

        if params.random_seed is not None:
            np.random.seed(params.random_seed)

        self.runtime = Runtime(clock=lambda: self.now)
        self.program = PusdProgram(self.runtime)
        self.client = PusdClient(self.program)
        self._deploy()

    def _to_native(self, whole_tokens: float) -> int:
        return int(whole_tokens * 10 ** self.preset.decimals)

    def _price_6dp(self, price: float) -> int:
        return int(price * PRICE_SCALE)

    def _deploy(self) -> None:
        symbol = self.params.collateral_symbol
        self.client.initialize(self.config.protocol.global_debt_ceiling)
        self.client.add_collateral(symbol, self.preset)

        price_6dp = self._price_6dp(self.params.initial_price)
        deposits = np.random.uniform(self.params.min_deposit, self.params.max_deposit, self.params.num_positions)
        utilizations = np.random.uniform(
            self.params.min_utilization, self.params.max_utilization, self.params.num_positions
        )

        total_debt = 0
        for i, (deposit, utilization) in enumerate(zip(deposits, utilizations)):
            name = f"user{i}"
            amount = self._to_native(deposit)
            self.client.create_user(name, {symbol: amount})
            self.client.deposit(name, symbol, amount)

            value_6dp = amount * price_6dp // 10 ** self.preset.decimals
            max_debt = value_6dp * self.preset.initial_ltv_bps // 10_000
            debt = int(max_debt * utilization)
            if debt > 0:
                self.client.mint(name, symbol, debt, price_6dp)
                total_debt += debt

        # The liquidator funds itself with a deep, conservative position
        liquidator_collateral = self._to_native(self.params.max_deposit * self.params.num_positions * 20)
        self.client.create_user("liquidator", {symbol: liquidator_collateral})
        self.client.deposit("liquidator", symbol, liquidator_collateral)
        self.client.mint("liquidator", symbol, total_debt, price_6dp)

        self.keeper = Keeper(
            self.program,
            self.client.protocol,
            self.client.liquidator_accounts("liquidator"),
            config=self.config.keeper,
            oracle_config=self.config.oracle,
        )

    def _oracle_price(self, price: float) -> OraclePrice:
        return OraclePrice(price=int(price * 10 ** -ORACLE_EXPO), expo=ORACLE_EXPO, publish_time=self.now)

    def simulate(self) -> pd.DataFrame:
        symbol = self.params.collateral_symbol
        mint = self.client.collaterals[symbol].mint
        current_price = self.params.initial_price
        step_secs = 86_400 // self.params.steps_per_day
        total_steps = self.params.simulation_days * self.params.steps_per_day
        liquidator_position = self.client.position_key("liquidator", symbol)
        rows = []

        for step in range(total_steps):
            # Simulate price movement with Brownian motion
            price_change = np.random.normal(0, self.params.price_volatility)
            current_price *= (1 + price_change)
            self.now += step_secs

            prices = {mint: self._oracle_price(current_price)}
            results = self.keeper.run_once(prices, self.now)

            protocol = self.client.protocol_state()
            collateral = self.client.collateral_state(symbol)
            healths = [
                h.health_bps for h in self.keeper.scan(prices, self.now)
                if h.position != liquidator_position
            ]
            rows.append({
                "day": step / self.params.steps_per_day,
                "price": current_price,
                "total_debt": protocol.total_debt_pusd / PRICE_SCALE,
                "total_collateral": collateral.total_collateral / 10 ** self.preset.decimals,
                "liquidations": len(results),
                "repaid": sum(r.repaid_pusd_6dp for r in results) / PRICE_SCALE,
                "seized": sum(r.seized_collateral_amount for r in results) / 10 ** self.preset.decimals,
                "min_health_bps": min(healths) if healths else np.nan,
            })

        self.history = pd.DataFrame(rows)
        self.history["cumulative_repaid"] = self.history["repaid"].cumsum()
        return self.history

    def plot_results(self):
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)
        df = self.history

        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

        ax1.plot(df["day"], df["price"], label=f'{self.params.collateral_symbol} Price')
        ax1.set_ylabel('Price (USD)')
        ax1.set_title('Collateral Price Over Time')
        ax1.legend()
        ax1.grid(True)

        ax2.plot(df["day"], df["min_health_bps"], label='Lowest user health', color='orange')
        ax2.axhline(y=self.preset.maintenance_ltv_bps, color='r', linestyle='--', alpha=0.3, label='Maintenance')
        ax2.set_ylabel('Health (bps)')
        ax2.legend()
        ax2.grid(True)

        ax3.plot(df["day"], df["cumulative_repaid"], label='Cumulative repaid PUSD', color='green')
        ax3.set_ylabel('PUSD')
        ax3.set_xlabel('Time (days)')
        ax3.legend()
        ax3.grid(True)

        plt.tight_layout()

        plot_name = f"vol_{self.params.price_volatility}_ltv_{self.preset.initial_ltv_bps}"
        if self.params.random_seed is not None:
            plot_name += f"_seed_{self.params.random_seed}"

        plt.savefig(output_dir / f"{plot_name}.png")
        df.to_csv(output_dir / f"{plot_name}.csv", index=False)
        plt.close()


def compare_volatilities(volatilities: List[float], base_params: SimulationParams, config: AppConfig) -> pd.DataFrame:
    """Run one simulation per volatility level and plot liquidated debt together"""
    output_dir = Path('research/results/volatility_comparison')
    output_dir.mkdir(parents=True, exist_ok=True)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10))
    summary = []

    for vol in volatilities:
        params = SimulationParams(
            initial_price=base_params.initial_price,
            price_volatility=vol,
            simulation_days=base_params.simulation_days,
            steps_per_day=base_params.steps_per_day,
            num_positions=base_params.num_positions,
            random_seed=base_params.random_seed,
            experiment_name=base_params.experiment_name,
            collateral_symbol=base_params.collateral_symbol,
        )
        sim = LiquidationSimulation(params, config)
        df = sim.simulate()

        ax1.plot(df["day"], df["price"], label=f"σ={vol}")
        ax2.plot(df["day"], df["cumulative_repaid"], label=f"σ={vol}")
        summary.append({
            "volatility": vol,
            "liquidations": int(df["liquidations"].sum()),
            "repaid_pusd": df["repaid"].sum(),
            "seized_collateral": df["seized"].sum(),
            "final_debt": df["total_debt"].iloc[-1],
        })

    ax1.set_ylabel('Price (USD)')
    ax1.set_title('Collateral Price Paths')
    ax1.legend(loc='upper left')
    ax1.grid(True, alpha=0.3)

    ax2.set_ylabel('Cumulative repaid PUSD')
    ax2.set_xlabel('Time (days)')
    ax2.set_title('Liquidated Debt Over Time')
    ax2.legend(loc='upper left')
    ax2.grid(True, alpha=0.3)

    seed_text = f"Random Seed: {base_params.random_seed}" if base_params.random_seed is not None else "No Seed"
    fig.text(0.02, 0.02, seed_text, fontsize=8, alpha=0.7)

    plt.tight_layout()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    plt.savefig(output_dir / f"volatility_comparison_{timestamp}.png", bbox_inches='tight', dpi=300)
    plt.close()

    summary_df = pd.DataFrame(summary)
    summary_df.to_csv(output_dir / f"volatility_comparison_{timestamp}.csv", index=False)
    return summary_df


def main():
    config = load_config()
    configure_logging(config.logging.level)

    base_params = SimulationParams(
        experiment_name="volatility_comparison",
        random_seed=57,
        simulation_days=60,
    )
    summary = compare_volatilities([0.005, 0.01, 0.02], base_params, config)
    print(summary.to_string(index=False))

    # # single run for testing
    # params = SimulationParams(experiment_name="single_run", random_seed=42)
    # sim = LiquidationSimulation(params, config)
    # sim.simulate()
    # sim.plot_results()


if __name__ == "__main__":
    main()
