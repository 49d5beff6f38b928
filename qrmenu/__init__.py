"""
                QR Table Menu

Digital restaurant menu and ordering backend. Customers scan a
per-table QR code, browse the menu, build a cart and place an order;
staff manage the menu and order status from an admin dashboard.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
