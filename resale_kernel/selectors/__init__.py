"""Read-only query selectors over the resale store."""

from resale_kernel.selectors.base import BaseSelector
from resale_kernel.selectors.logistics_selector import LogisticsSelector
from resale_kernel.selectors.purchase_selector import PurchaseSelector
from resale_kernel.selectors.sales_selector import SalesSelector

__all__ = [
    "BaseSelector",
    "LogisticsSelector",
    "PurchaseSelector",
    "SalesSelector",
]
