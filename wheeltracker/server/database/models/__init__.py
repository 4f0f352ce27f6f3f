"""Database models for the wheel tracker.

This module exports all SQLAlchemy ORM models. Models define the
database schema and relationships between entities.

Models:
    Account: Owns cash balance, reserve and every other entity
    Underlying: A symbol traded within an account
    StockLot: One acquisition of shares, consumed FIFO
    LedgerEntry: Append-only cash-affecting event
    StrategyInstance: A wheel cycle on one underlying
    OptionLeg: A short option attached to a wheel cycle
    ReinvestSignal: Proposed redeployment of freed cash
    WealthWheelTarget: Target percentage per category
    WealthWheelClassification: Category assigned to an underlying
"""

from .account import Account
from .ledger_entry import LedgerEntry
from .option_leg import OptionLeg
from .reinvest_signal import ReinvestSignal
from .stock_lot import StockLot
from .strategy_instance import StrategyInstance
from .underlying import Underlying
from .wealth_wheel import WealthWheelClassification, WealthWheelTarget

__all__ = [
    "Account",
    "Underlying",
    "StockLot",
    "LedgerEntry",
    "StrategyInstance",
    "OptionLeg",
    "ReinvestSignal",
    "WealthWheelTarget",
    "WealthWheelClassification",
]
