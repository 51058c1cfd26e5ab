"""Governance state"""
from dataclasses import dataclass


@dataclass
class Governance:
    """Timelock settings for future parameter changes (no operation consumes it yet).

    Address seed: ["governance", protocol]
    """
    protocol: str
    authority: str
    timelock_secs: int
    bump: int = 0
