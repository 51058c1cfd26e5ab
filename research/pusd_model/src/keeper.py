"""Liquidation keeper

Scans every position, prices its collateral from oracle data and liquidates
the ones whose health has fallen below maintenance. The keeper is a caller of
the program: a failed liquidation is logged and the scan moves on.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

from .config import KeeperConfig, OracleConfig
from .errors import InvalidPriceError, ProtocolError
from .fixed_point import token_amount_to_usd_6dp
from .instructions.liquidate import LiquidateAccounts
from .oracle import OraclePrice, normalize_price
from .program import PusdProgram
from .risk import compute_health_bps, is_above_maintenance
from .runtime import Runtime
from .state.collateral import CollateralConfig
from .state.protocol_config import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionHealth:
    position: str
    owner: str
    collateral_config: str
    collateral_mint: str
    collateral_amount: int
    debt_pusd: int
    price_6dp: int
    collateral_value_6dp: int
    health_bps: int
    liquidatable: bool


@dataclass(frozen=True)
class LiquidatorAccounts:
    liquidator: str
    pusd_account: str
    collateral_accounts: Dict[str, str] = field(default_factory=dict)  # collateral mint -> token account


@dataclass(frozen=True)
class LiquidationResult:
    position: str
    owner: str
    repaid_pusd_6dp: int
    seized_collateral_amount: int


class Keeper:
    def __init__(
        self,
        program: PusdProgram,
        protocol: str,
        liquidator: LiquidatorAccounts,
        config: Optional[KeeperConfig] = None,
        oracle_config: Optional[OracleConfig] = None,
    ) -> None:
        self.program = program
        self.protocol = protocol
        self.liquidator = liquidator
        self.config = config or KeeperConfig()
        self.oracle_config = oracle_config or OracleConfig()

    @property
    def runtime(self) -> Runtime:
        return self.program.runtime

    def _fresh_prices(self, prices: Mapping[str, OraclePrice], now: int) -> Dict[str, int]:
        fresh: Dict[str, int] = {}
        for mint, oracle_price in prices.items():
            try:
                fresh[mint] = normalize_price(oracle_price, now, self.oracle_config.max_staleness_secs)
            except InvalidPriceError as e:
                logger.warning("Skipping %s: %s", mint, e)
        return fresh

    def scan(self, prices: Mapping[str, OraclePrice], now: int) -> List[PositionHealth]:
        """Health of every priced position with debt"""
        fresh = self._fresh_prices(prices, now)
        report: List[PositionHealth] = []

        for key, pos in self.runtime.store.positions():
            if pos.debt_pusd == 0:
                continue
            cfg = self.runtime.store.get(pos.collateral_config, CollateralConfig)
            if cfg is None or cfg.protocol != self.protocol:
                continue
            price = fresh.get(cfg.collateral_mint)
            if price is None:
                continue

            decimals = self.runtime.tokens.get_mint(cfg.collateral_mint).decimals
            value = token_amount_to_usd_6dp(pos.collateral_amount, decimals, price)
            if value is None:
                logger.warning("Collateral value overflow for position %s", key)
                continue

            report.append(PositionHealth(
                position=key,
                owner=pos.owner,
                collateral_config=pos.collateral_config,
                collateral_mint=cfg.collateral_mint,
                collateral_amount=pos.collateral_amount,
                debt_pusd=pos.debt_pusd,
                price_6dp=price,
                collateral_value_6dp=value,
                health_bps=compute_health_bps(value, pos.debt_pusd),
                liquidatable=not is_above_maintenance(value, pos.debt_pusd, cfg.maintenance_ltv_bps),
            ))

        logger.info(
            "Scanned %d positions, %d liquidatable",
            len(report), sum(1 for h in report if h.liquidatable),
        )
        return report

    def run_once(self, prices: Mapping[str, OraclePrice], now: int) -> List[LiquidationResult]:
        """Liquidate every position below maintenance"""
        results: List[LiquidationResult] = []
        protocol = self.runtime.store.load(self.protocol, Protocol)

        for health in self.scan(prices, now):
            if not health.liquidatable:
                continue
            collateral_account = self.liquidator.collateral_accounts.get(health.collateral_mint)
            if collateral_account is None:
                logger.warning("No liquidator account for %s, skipping %s", health.collateral_mint, health.position)
                continue

            repay = health.debt_pusd
            if self.config.max_repay_pusd_6dp:
                repay = min(repay, self.config.max_repay_pusd_6dp)

            cfg = self.runtime.store.get(health.collateral_config, CollateralConfig)
            accounts = LiquidateAccounts(
                protocol=self.protocol,
                pusd_mint=protocol.pusd_mint,
                collateral_config=health.collateral_config,
                vault=cfg.vault,
                position=health.position,
                liquidator_pusd_account=self.liquidator.pusd_account,
                liquidator_collateral_account=collateral_account,
                owner=health.owner,
                liquidator=self.liquidator.liquidator,
            )
            decimals = self.runtime.tokens.get_mint(health.collateral_mint).decimals
            try:
                pos = self.program.liquidate(accounts, repay, health.price_6dp, decimals)
            except ProtocolError as e:
                logger.error("Liquidation of %s failed: %s", health.position, e)
                continue

            results.append(LiquidationResult(
                position=health.position,
                owner=health.owner,
                repaid_pusd_6dp=health.debt_pusd - pos.debt_pusd,
                seized_collateral_amount=health.collateral_amount - pos.collateral_amount,
            ))

        return results

    def run(
        self,
        price_source: Callable[[int], Mapping[str, OraclePrice]],
        clock: Optional[Callable[[], int]] = None,
        iterations: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> List[LiquidationResult]:
        """Call run_once every `interval_secs` until `iterations` passes have run

        `price_source` is asked for fresh oracle data at the start of each pass.
        With `iterations=None` the loop runs until interrupted.
        """
        clock = clock or self.runtime.now
        results: List[LiquidationResult] = []
        passes = 0
        while True:
            now = clock()
            liquidated = self.run_once(price_source(now), now)
            results.extend(liquidated)
            passes += 1
            logger.debug("Keeper pass %d at %d liquidated %d positions", passes, now, len(liquidated))
            if iterations is not None and passes >= iterations:
                return results
            sleep(self.config.interval_secs)
