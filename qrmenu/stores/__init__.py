"""
                        Client State Stores

State that belongs to one visitor rather than to the database:
    - cart: cart lines and the sidebar visibility flag
    - table: table number taken from the QR link
    - history: ids of orders this visitor placed

Stores are plain containers with explicit snapshot methods. Loading and
saving them is the job of qrmenu.stores.session.CustomerSession.
"""

from qrmenu.stores.cart import CartItem, CartStore
from qrmenu.stores.table import TableStore
from qrmenu.stores.history import OrderHistoryStore, DEFAULT_HISTORY_LIMIT

__all__ = [
    "CartItem",
    "CartStore",
    "TableStore",
    "OrderHistoryStore",
    "DEFAULT_HISTORY_LIMIT",
]
