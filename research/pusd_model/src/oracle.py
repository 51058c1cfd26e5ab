"""Oracle price model and normalization to 6dp USD"""
import logging
from dataclasses import dataclass
from typing import Tuple

from .constants import I128_MAX, PUSD_DECIMALS
from .errors import ErrorCode, require
from .fixed_point import ten_pow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OraclePrice:
    """Pyth-style price: value = price * 10^expo"""
    price: int  # i64, e.g. 2345 with expo=-2 for $23.45
    expo: int  # i32
    conf: int = 0  # confidence interval, same exponent as price
    publish_time: int = 0  # unix seconds

    def is_fresh(self, now_ts: int, max_age_secs: int) -> bool:
        """True if the price was published at most `max_age_secs` ago"""
        if self.publish_time <= 0:
            return False
        return now_ts - self.publish_time <= max_age_secs

    def to_usd_6dp(self) -> Tuple[int, bool]:
        """Rescale to a 6-decimal USD integer.

        Returns (value_6dp, ok). ok is False for a non-positive price or when
        the rescale overflows i128.
        """
        if self.price <= 0:
            return 0, False

        target_exp = self.expo + PUSD_DECIMALS
        if target_exp >= 0:
            value = self.price * ten_pow(target_exp)
            if value > I128_MAX:
                return 0, False
            return value, True

        pow_ = ten_pow(-target_exp)
        if pow_ == 0:
            return 0, False
        return self.price // pow_, True


def normalize_price(oracle_price: OraclePrice, now_ts: int, max_age_secs: int) -> int:
    """Fresh 6dp USD price, raising InvalidPriceError when it is stale or unusable"""
    require(
        oracle_price.is_fresh(now_ts, max_age_secs),
        ErrorCode.OracleStale,
        f"published at {oracle_price.publish_time}, now {now_ts}",
    )
    value, ok = oracle_price.to_usd_6dp()
    require(ok, ErrorCode.InvalidOracle, f"price={oracle_price.price} expo={oracle_price.expo}")
    require(value > 0, ErrorCode.PriceOutOfBounds)
    logger.debug("Normalized oracle price %s^%s to %s (6dp)", oracle_price.price, oracle_price.expo, value)
    return value
