"""
Resale admin CLI.

Record order totals, shipments, purchases, sales and products; revalue
SKUs; recompute every derived field; show stock.

Entry point: ``resale-admin`` (console script) or python -m scripts.cli.main
"""

from scripts.cli.main import main

__all__ = ["main"]
