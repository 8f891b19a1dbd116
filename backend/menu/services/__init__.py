"""
Menu services.

- MenuService: categories, add-ons and menu items maintenance plus lookups
- StockService: locked stock counter changes and low stock alerts
"""

from .menu_service import MenuService, menu_service
from .stock_service import LowStockAlert, StockChange, StockService

__all__ = [
    "MenuService",
    "menu_service",
    "StockService",
    "StockChange",
    "LowStockAlert",
]
