from .auth import User, SessionToken, USER_ROLES
from .inventory import StockItem, STOCK_CATEGORIES
from .staff import Staff, STAFF_ROLES
from .customers import (
    Customer,
    CustomerDevice,
    ServiceHistory,
    SERVICE_TYPES,
    CUSTOMER_STATUSES,
    DEVICE_STATUSES,
    SERVICE_HISTORY_TYPES,
    SERVICE_HISTORY_STATUSES,
)
from .transactions import Transaction, TransactionItem, TRANSACTION_TYPES, TRANSACTION_STATUSES

__all__ = [
    'User', 'SessionToken', 'USER_ROLES',
    'StockItem', 'STOCK_CATEGORIES',
    'Staff', 'STAFF_ROLES',
    'Customer', 'CustomerDevice', 'ServiceHistory',
    'SERVICE_TYPES', 'CUSTOMER_STATUSES', 'DEVICE_STATUSES',
    'SERVICE_HISTORY_TYPES', 'SERVICE_HISTORY_STATUSES',
    'Transaction', 'TransactionItem', 'TRANSACTION_TYPES', 'TRANSACTION_STATUSES',
]
