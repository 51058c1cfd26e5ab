"""Constants and builders shared by the test modules"""
from __future__ import annotations

from pusd_model.src.client import PusdClient
from pusd_model.src.config import CollateralPreset
from pusd_model.src.constants import PRICE_SCALE
from pusd_model.src.program import PusdProgram

NOW = 1_700_000_000
SOL = "SOL"
SOL_DECIMALS = 9
ONE_SOL = 10 ** SOL_DECIMALS
PUSD = PRICE_SCALE  # 1 PUSD in 6dp


def usd(dollars: int) -> int:
    """Whole dollars as a 6dp price/value"""
    return dollars * PRICE_SCALE


SOL_PRESET = CollateralPreset(
    decimals=SOL_DECIMALS,
    initial_ltv_bps=9000,
    maintenance_ltv_bps=8000,
    liq_bonus_bps=500,
    debt_ceiling=1_000_000 * PUSD,
)


class FakeClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, secs: int) -> None:
        self.now += secs


def make_client(program: PusdProgram, global_debt_ceiling: int = 10_000_000 * PUSD) -> PusdClient:
    """Initialized protocol with SOL registered and alice, bob and liquidator funded with SOL"""
    c = PusdClient(program)
    c.initialize(global_debt_ceiling)
    c.add_collateral(SOL, SOL_PRESET)
    c.create_user("alice", {SOL: 100 * ONE_SOL})
    c.create_user("bob", {SOL: 100 * ONE_SOL})
    c.create_user("liquidator", {SOL: 10_000 * ONE_SOL})
    return c
