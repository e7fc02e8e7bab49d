"""ORM models for the resale store."""

from resale_kernel.models.logistics import LogisticsShipmentModel
from resale_kernel.models.product import ProductModel
from resale_kernel.models.purchase import OrderInvoiceTotalModel, PurchaseLineModel
from resale_kernel.models.sales import SaleLineModel

__all__ = [
    "LogisticsShipmentModel",
    "OrderInvoiceTotalModel",
    "ProductModel",
    "PurchaseLineModel",
    "SaleLineModel",
]
