from .catalog import Product
from .stock import StockBatch
from .transactions import ActionType, STOCK_ACTIONS, TransactionLogEntry

__all__ = [
    'Product',
    'StockBatch',
    'ActionType', 'STOCK_ACTIONS', 'TransactionLogEntry',
]
