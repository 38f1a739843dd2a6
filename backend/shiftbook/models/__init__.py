from .auth import User, SessionToken
from .catalog import CatalogItem, CATEGORIES
from .shifts import (
    Shift, ProductionEntry, SaleEntry, DischargeEntry, ShiftInventoryCount,
    SHIFT_STATUS_OPEN, SHIFT_STATUS_CLOSED, DISCHARGE_REASONS,
)
from .reports import ShiftReport

__all__ = [
    'User', 'SessionToken',
    'CatalogItem', 'CATEGORIES',
    'Shift', 'ProductionEntry', 'SaleEntry', 'DischargeEntry', 'ShiftInventoryCount',
    'SHIFT_STATUS_OPEN', 'SHIFT_STATUS_CLOSED', 'DISCHARGE_REASONS',
    'ShiftReport',
]
