"""Liquidation of unhealthy positions

alice_borrowed: 10 SOL deposited, 800 PUSD debt. With 80% maintenance the
position becomes liquidatable below $64/SOL.
"""
from dataclasses import replace

import pytest

from pusd_model.src.errors import (
    AccountMismatchError,
    ErrorCode,
    InvalidAmountError,
    InvalidPriceError,
    LiquidationError,
    TokenError,
)
from pusd_model.src.events import Liquidated
from pusd_model.tests.helpers import ONE_SOL, PUSD, SOL, usd



def balances(client):
    tokens = client.runtime.tokens
    return {
        "liquidator_pusd": tokens.balance("liquidator-pusd"),
        "liquidator_sol": tokens.balance("liquidator-SOL"),
        "vault": tokens.balance(client.collaterals[SOL].vault),
        "supply": tokens.get_mint(client.pusd_mint).supply,
        "total_debt": client.protocol_state().total_debt_pusd,
        "cfg_debt": client.collateral_state(SOL).total_debt_pusd,
        "cfg_collateral": client.collateral_state(SOL).total_collateral,
    }


@pytest.mark.parametrize("price", [usd(100), usd(64)])
def test_healthy_position_is_not_liquidatable(alice_borrowed, price):
    with pytest.raises(LiquidationError) as exc:
        alice_borrowed.liquidate("liquidator", "alice", SOL, 100 * PUSD, price)
    assert exc.value.code is ErrorCode.NotLiquidatable


def test_partial_liquidation(alice_borrowed):
    client = alice_borrowed
    before = balances(client)

    pos = client.liquidate("liquidator", "alice", SOL, 100 * PUSD, usd(60))

    # 100 PUSD / $60 = 1.666666666 SOL, plus 5% bonus
    seized = 1_749_999_999
    assert pos.debt_pusd == 700 * PUSD
    assert pos.collateral_amount == 10 * ONE_SOL - seized

    after = balances(client)
    assert after["liquidator_pusd"] == before["liquidator_pusd"] - 100 * PUSD
    assert after["liquidator_sol"] == before["liquidator_sol"] + seized
    assert after["vault"] == before["vault"] - seized
    assert after["supply"] == before["supply"] - 100 * PUSD
    assert after["total_debt"] == before["total_debt"] - 100 * PUSD
    assert after["cfg_debt"] == before["cfg_debt"] - 100 * PUSD
    assert after["cfg_collateral"] == before["cfg_collateral"] - seized

    assert client.runtime.events[-1] == Liquidated(
        liquidator="liquidator",
        owner="alice",
        collateral_mint=client.collaterals[SOL].mint,
        repaid_pusd_6dp=100 * PUSD,
        seized_collateral_amount=seized,
    )


def test_repeated_partial_liquidations(alice_borrowed):
    client = alice_borrowed
    client.liquidate("liquidator", "alice", SOL, 100 * PUSD, usd(60))
    # 8.250000001 SOL at $60 = $495 against 700 PUSD, still below maintenance
    pos = client.liquidate("liquidator", "alice", SOL, 100 * PUSD, usd(60))
    assert pos.debt_pusd == 600 * PUSD
    assert pos.collateral_amount == 10 * ONE_SOL - 2 * 1_749_999_999


def test_repay_is_clamped_to_debt_and_seize_to_collateral(alice_borrowed):
    client = alice_borrowed
    before = balances(client)

    # 800 PUSD / $60 * 1.05 = 13.99 SOL, more than the 10 SOL held
    pos = client.liquidate("liquidator", "alice", SOL, 5_000 * PUSD, usd(60))

    assert pos.debt_pusd == 0
    assert pos.collateral_amount == 0
    after = balances(client)
    assert after["liquidator_pusd"] == before["liquidator_pusd"] - 800 * PUSD
    assert after["liquidator_sol"] == before["liquidator_sol"] + 10 * ONE_SOL
    assert client.runtime.events[-1].repaid_pusd_6dp == 800 * PUSD
    assert client.runtime.events[-1].seized_collateral_amount == 10 * ONE_SOL

    # fully closed positions have infinite health
    with pytest.raises(LiquidationError):
        client.liquidate("liquidator", "alice", SOL, PUSD, usd(1))


def test_liquidator_without_pusd_changes_nothing(alice_borrowed):
    client = alice_borrowed
    before = balances(client)
    with pytest.raises(TokenError) as exc:
        client.liquidate("bob", "alice", SOL, 100 * PUSD, usd(60))
    assert exc.value.code is ErrorCode.InsufficientFunds
    assert balances(client) == before
    assert client.position("alice", SOL).debt_pusd == 800 * PUSD


def test_zero_price_rolls_back_the_burn(alice_borrowed):
    client = alice_borrowed
    before = balances(client)
    events = len(client.runtime.events)
    # zero value makes the position liquidatable, then inverse pricing fails
    with pytest.raises(InvalidPriceError) as exc:
        client.liquidate("liquidator", "alice", SOL, 100 * PUSD, 0)
    assert exc.value.code is ErrorCode.PriceOutOfBounds
    assert balances(client) == before
    assert len(client.runtime.events) == events


def test_zero_repay_is_rejected(alice_borrowed):
    with pytest.raises(InvalidAmountError) as exc:
        alice_borrowed.liquidate("liquidator", "alice", SOL, 0, usd(60))
    assert exc.value.code is ErrorCode.ZeroAmount


def test_seize_that_rounds_to_zero_is_rejected(funded_liquidator):
    client = funded_liquidator
    client.create_user("carol", {SOL: 1})
    # one lamport at $10B/SOL is worth $10
    client.deposit("carol", SOL, 1)
    client.mint("carol", SOL, 9 * PUSD, usd(10_000_000_000))

    before = balances(client)
    with pytest.raises(InvalidAmountError) as exc:
        client.liquidate("liquidator", "carol", SOL, 1, usd(1_000_000_000))
    assert exc.value.code is ErrorCode.InvalidAmount
    assert balances(client) == before


def test_seize_amount_must_fit_u64_before_clamping(alice_borrowed):
    client = alice_borrowed
    accounts = client.liquidate_accounts("liquidator", "alice", SOL)
    # with 19 decimals the seize amount for 800 PUSD is ~1.4e20 native units
    with pytest.raises(InvalidAmountError) as exc:
        client.program.liquidate(accounts, 800 * PUSD, usd(60), 19)
    assert exc.value.code is ErrorCode.InvalidAmount
    assert client.position("alice", SOL).debt_pusd == 800 * PUSD


@pytest.mark.parametrize(
    "field, value, code",
    [
        ("vault", "liquidator-SOL", ErrorCode.VaultMismatch),
        ("position", "not-derived", ErrorCode.InvalidPda),
        ("pusd_mint", "SOL-mint", ErrorCode.MintMismatch),
    ],
)
def test_liquidate_account_checks(alice_borrowed, field, value, code):
    client = alice_borrowed
    accounts = replace(client.liquidate_accounts("liquidator", "alice", SOL), **{field: value})
    with pytest.raises(AccountMismatchError) as exc:
        client.program.liquidate(accounts, 100 * PUSD, usd(60), 9)
    assert exc.value.code is code


def test_liquidation_ignores_pause_and_inactive_collateral(alice_borrowed):
    client = alice_borrowed
    client.toggle_pause(True)
    client.set_collateral_active(SOL, False)
    pos = client.liquidate("liquidator", "alice", SOL, 100 * PUSD, usd(60))
    assert pos.debt_pusd == 700 * PUSD
