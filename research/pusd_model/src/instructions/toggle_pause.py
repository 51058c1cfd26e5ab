"""Emergency pause/unpause of minting"""
from dataclasses import dataclass

from ..errors import ErrorCode, require
from ..events import PauseToggled
from ..runtime import Runtime


@dataclass(frozen=True)
class TogglePauseAccounts:
    protocol: str
    authority: str  # signer


def handle_toggle_pause(runtime: Runtime, accounts: TogglePauseAccounts, paused: bool) -> None:
    protocol, _ = runtime.load_protocol(accounts.protocol)
    require(protocol.authority == accounts.authority, ErrorCode.Unauthorized)
    protocol.mint_paused = paused
    runtime.emit(PauseToggled(protocol=accounts.protocol, paused=paused))
