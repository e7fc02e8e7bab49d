"""
Resale services -- stateful orchestration over the engines and the store.

Usage:
    from resale_services import LandedCostService
"""

from resale_services.landed_cost_service import LandedCostService, RecalculationSummary

__all__ = [
    "LandedCostService",
    "RecalculationSummary",
]
