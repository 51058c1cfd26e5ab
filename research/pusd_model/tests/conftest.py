"""Shared fixtures: a deployed protocol with one SOL collateral and funded users."""
from __future__ import annotations

import pytest

from pusd_model.src.client import PusdClient
from pusd_model.src.program import PusdProgram
from pusd_model.src.runtime import Runtime
from pusd_model.tests.helpers import NOW, ONE_SOL, PUSD, SOL, FakeClock, make_client, usd


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def runtime(clock: FakeClock) -> Runtime:
    return Runtime(clock=clock)


@pytest.fixture()
def program(runtime: Runtime) -> PusdProgram:
    return PusdProgram(runtime)


@pytest.fixture()
def client(program: PusdProgram) -> PusdClient:
    return make_client(program)


@pytest.fixture()
def funded_liquidator(client: PusdClient) -> PusdClient:
    """Liquidator holding 10k PUSD minted against its own deep position"""
    client.deposit("liquidator", SOL, 1_000 * ONE_SOL)
    client.mint("liquidator", SOL, 10_000 * PUSD, usd(100))
    return client


@pytest.fixture()
def alice_borrowed(funded_liquidator: PusdClient) -> PusdClient:
    """Alice: 10 SOL deposited, 800 PUSD minted at $100/SOL (health 12500 bps)"""
    client = funded_liquidator
    client.deposit("alice", SOL, 10 * ONE_SOL)
    client.mint("alice", SOL, 800 * PUSD, usd(100))
    return client
