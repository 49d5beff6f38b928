"""
                        Services Module

Data access and infrastructure services. Backends with a development and
a production flavour (state storage, image storage) are picked by a
cached factory from the environment settings.

Services:
    - catalog: categories and menu items
    - orders: order placement, status changes and dashboard figures
    - auth: admin sign-in and sessions
    - realtime: in-process order event bus
    - order_feed: live order list for the admin dashboard
    - state: visitor session state (memory or Redis)
    - storage: menu image storage (local directory or memory)
"""

from qrmenu.services.result import ServiceResult

__all__ = ["ServiceResult"]
