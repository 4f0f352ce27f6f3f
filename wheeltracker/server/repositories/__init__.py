"""Data access layer repositories."""

from wheeltracker.server.repositories.account import AccountRepository
from wheeltracker.server.repositories.cycle import CycleRepository
from wheeltracker.server.repositories.ledger import LedgerRepository
from wheeltracker.server.repositories.lot import LotRepository
from wheeltracker.server.repositories.signal import SignalRepository
from wheeltracker.server.repositories.underlying import UnderlyingRepository
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.repositories.wealth_wheel import WealthWheelRepository

__all__ = [
    "AccountRepository",
    "CycleRepository",
    "LedgerRepository",
    "LotRepository",
    "SignalRepository",
    "UnderlyingRepository",
    "UnitOfWork",
    "WealthWheelRepository",
]
