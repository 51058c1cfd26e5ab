"""Protocol initialization"""
from dataclasses import dataclass

from ..constants import PROTOCOL_SEED
from ..errors import ErrorCode, require
from ..events import Initialized
from ..runtime import Runtime
from ..state.protocol_config import Protocol
from .validation import require_u64_amount


@dataclass(frozen=True)
class InitializeAccounts:
    protocol: str  # must be derive(["protocol", authority])
    authority: str  # signer
    pusd_mint: str


def handle_initialize(runtime: Runtime, accounts: InitializeAccounts, global_debt_ceiling: int) -> Protocol:
    """Create the Protocol and bind the PUSD mint (its mint authority must be the Protocol)"""
    require_u64_amount(global_debt_ceiling)
    expected = runtime.derive_address(PROTOCOL_SEED, accounts.authority)
    require(accounts.protocol == expected, ErrorCode.InvalidPda, "protocol")

    pusd_mint = runtime.tokens.get_mint(accounts.pusd_mint)
    protocol = runtime.store.create(
        accounts.protocol,
        Protocol(
            authority=accounts.authority,
            pusd_mint=accounts.pusd_mint,
            global_debt_ceiling=global_debt_ceiling,
            mint_paused=False,
        ),
    )

    # PUSD can only be issued through the Protocol's own identity
    require(pusd_mint.mint_authority == accounts.protocol, ErrorCode.Unauthorized, "pusd mint authority")

    runtime.emit(Initialized(
        protocol=accounts.protocol,
        pusd_mint=protocol.pusd_mint,
        authority=protocol.authority,
        global_debt_ceiling=global_debt_ceiling,
    ))
    return protocol
