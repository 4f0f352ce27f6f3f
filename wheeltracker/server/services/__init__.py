"""Business services for the wheel tracker.

Services take a UnitOfWork and own the transaction boundary of every
public operation.
"""

from wheeltracker.server.services.accounts import AccountService
from wheeltracker.server.services.cycle_engine import CycleEvent, StrategyCycleEngine
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.server.services.lot_tracker import ConsumedLot, LotConsumption, LotTracker
from wheeltracker.server.services.positions import PositionService
from wheeltracker.server.services.price_refresh import (
    PriceRefreshReport,
    PriceRefreshService,
    SymbolRefreshResult,
)
from wheeltracker.server.services.rebalancer import (
    WealthWheelRebalancer,
    WheelCalculation,
    WheelSlice,
)
from wheeltracker.server.services.reinvest import ReinvestResult, ReinvestSignalEngine
from wheeltracker.server.services.trade_entry import (
    OptionEntryResult,
    StockEntryResult,
    TradeEntryService,
)

__all__ = [
    "AccountService",
    "ConsumedLot",
    "CycleEvent",
    "Ledger",
    "LotConsumption",
    "LotTracker",
    "OptionEntryResult",
    "PositionService",
    "PriceRefreshReport",
    "PriceRefreshService",
    "ReinvestResult",
    "ReinvestSignalEngine",
    "StockEntryResult",
    "StrategyCycleEngine",
    "SymbolRefreshResult",
    "TradeEntryService",
    "WealthWheelRebalancer",
    "WheelCalculation",
    "WheelSlice",
]
