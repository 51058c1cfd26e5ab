"""Host substrate - account store, derived identities, signer capabilities, atomic execution

The protocol model does not persist or sign anything itself. It relies on a
host that locates records by derived address, lends the program the signing
power of its own records, and applies each operation all-or-nothing. This is
an in-memory version of that host for tests and research.
"""
import copy
import hashlib
import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from .errors import ErrorCode, error_for, require
from .state.collateral import CollateralConfig
from .state.position import Position
from .state.protocol_config import Protocol
from .token_program import TokenProgram

logger = logging.getLogger(__name__)

PROGRAM_ID = "PUSD111111111111111111111111111111111111111"

T = TypeVar("T")


class AccountStore:
    """Fixed-layout records keyed by deterministic address"""

    def __init__(self, program_id: str = PROGRAM_ID) -> None:
        self.program_id = program_id
        self.records: Dict[str, object] = {}

    def derive_address(self, seed_prefix: bytes, *keys: str) -> str:
        """Deterministic address for a record kind and its key fields"""
        h = hashlib.sha256()
        h.update(self.program_id.encode())
        for part in (seed_prefix, *(k.encode() for k in keys)):
            h.update(len(part).to_bytes(4, "big"))
            h.update(part)
        return h.hexdigest()

    def create(self, key: str, record: T) -> T:
        require(key not in self.records, ErrorCode.AlreadyInitialized, key)
        self.records[key] = record
        return record

    def get(self, key: str, kind: Type[T]) -> Optional[T]:
        record = self.records.get(key)
        if record is None:
            return None
        require(isinstance(record, kind), ErrorCode.InvalidPda, f"{key} is not a {kind.__name__}")
        return record

    def load(self, key: str, kind: Type[T]) -> T:
        record = self.get(key, kind)
        if record is None:
            code = ErrorCode.PositionNotFound if kind is Position else ErrorCode.AccountNotFound
            raise error_for(code, key)
        return record

    def positions(self) -> Iterator[Tuple[str, Position]]:
        for key, record in list(self.records.items()):
            if isinstance(record, Position):
                yield key, record


class ProtocolSigner:
    """Signs as the Protocol's derived identity; may only mint the bound PUSD asset"""

    def __init__(self, tokens: TokenProgram, identity: str, pusd_mint: str) -> None:
        self._tokens = tokens
        self.identity = identity
        self._pusd_mint = pusd_mint

    def mint_to(self, dest: str, amount: int) -> None:
        self._tokens.mint_to(self._pusd_mint, dest, self.identity, amount)


class CollateralSigner:
    """Signs as a CollateralConfig's derived identity; may only move funds out of its vault"""

    def __init__(self, tokens: TokenProgram, identity: str, vault: str) -> None:
        self._tokens = tokens
        self.identity = identity
        self._vault = vault

    def transfer_from_vault(self, dest: str, amount: int) -> None:
        self._tokens.transfer(self._vault, dest, self.identity, amount)


def _restore(live: Dict[str, object], saved: Dict[str, object]) -> None:
    """Put `live` back to `saved`, keeping the identity of surviving objects"""
    for key in list(live):
        if key not in saved:
            del live[key]
    for key, record in saved.items():
        current = live.get(key)
        if current is not None and type(current) is type(record):
            vars(current).clear()
            vars(current).update(vars(record))
        else:
            live[key] = record


class Runtime:
    """Store, token facility, clock and event log with all-or-nothing execution"""

    def __init__(
        self,
        store: Optional[AccountStore] = None,
        tokens: Optional[TokenProgram] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.store = store if store is not None else AccountStore()
        self.tokens = tokens if tokens is not None else TokenProgram()
        self.clock = clock if clock is not None else (lambda: int(time.time()))
        self.events: List[object] = []

    def now(self) -> int:
        return self.clock()

    def emit(self, event: object) -> None:
        logger.debug("event %r", event)
        self.events.append(event)

    def derive_address(self, seed_prefix: bytes, *keys: str) -> str:
        return self.store.derive_address(seed_prefix, *keys)

    @contextmanager
    def atomic(self, label: str = "operation") -> Iterator["Runtime"]:
        """Apply everything inside the block, or nothing if it raises"""
        saved_records, saved_mints, saved_accounts = copy.deepcopy(
            (self.store.records, self.tokens.mints, self.tokens.accounts)
        )
        saved_events = len(self.events)
        try:
            yield self
        except Exception as e:
            _restore(self.store.records, saved_records)
            _restore(self.tokens.mints, saved_mints)
            _restore(self.tokens.accounts, saved_accounts)
            del self.events[saved_events:]
            logger.warning("%s rolled back: %s", label, e)
            raise

    # ---- record loaders ------------------------------------------------

    def load_protocol(self, key: str) -> Tuple[Protocol, ProtocolSigner]:
        protocol = self.store.load(key, Protocol)
        return protocol, ProtocolSigner(self.tokens, key, protocol.pusd_mint)

    def load_collateral_config(self, key: str) -> Tuple[CollateralConfig, CollateralSigner]:
        cfg = self.store.load(key, CollateralConfig)
        return cfg, CollateralSigner(self.tokens, key, cfg.vault)

    def load_position(self, key: str) -> Position:
        return self.store.load(key, Position)
