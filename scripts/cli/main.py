"""CLI main: argparse subcommands for record entry, revaluation and stock."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import date
from decimal import Decimal, InvalidOperation

from resale_config import build_costing_policy, get_active_config
from resale_config.loader import log_level
from resale_engines.policy import CostingPolicy
from resale_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from resale_kernel.domain.clock import SystemClock
from resale_kernel.domain.records import Product, PurchaseLine, SaleLine
from resale_kernel.exceptions import ResaleKernelError
from resale_kernel.logging_config import configure_logging
from resale_services.landed_cost_service import LandedCostService
from scripts.cli.util import fmt_amount, fmt_money, quiet_logging


def _decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal number: {text!r}") from None


def _date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {text!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resale-admin",
        description="Landed-cost and inventory valuation for the resale admin.",
    )
    parser.add_argument("--config", default=None, help="Configuration YAML (default: RESALE_CONFIG or packaged defaults).")
    parser.add_argument("--db-url", default=None, help="Database URL (overrides the configuration).")
    parser.add_argument("--quiet", action="store_true", help="Mute structured log output on stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the tables.")

    p = sub.add_parser("order-total", help="Set an order's invoiced total (source currency).")
    p.add_argument("order_number")
    p.add_argument("invoiced_total", type=_decimal)

    p = sub.add_parser("shipment", help="Register a local retrieval and distribute its cost.")
    p.add_argument("tracking_code")
    p.add_argument("total_retrieval_cost", type=_decimal)
    p.add_argument("--date", type=_date, default=None, help="Retrieval date (default: today).")

    p = sub.add_parser("purchase", help="Register a purchase line.")
    p.add_argument("--order", required=True, dest="order_number")
    p.add_argument("--sku", required=True)
    p.add_argument("--supplier", required=True)
    p.add_argument("--quantity", required=True, type=int)
    p.add_argument("--units-per-package", type=int, default=1)
    p.add_argument("--unit-cost", required=True, type=_decimal)
    p.add_argument("--exchange-rate", required=True, type=_decimal)
    p.add_argument("--weight", required=True, type=_decimal, help="Shipped weight in kg.")
    p.add_argument("--tracking-us", default=None)
    p.add_argument("--tracking-py", default=None)
    p.add_argument("--date", type=_date, default=None, help="Purchase date (default: today).")

    p = sub.add_parser("sale", help="Register a sale priced from the catalog.")
    p.add_argument("--sku", required=True)
    p.add_argument("--quantity", required=True, type=int)
    p.add_argument("--customer", required=True)
    p.add_argument("--receipt", default=None)
    p.add_argument("--notes", default=None)
    p.add_argument("--date", type=_date, default=None, help="Sale date (default: today).")

    p = sub.add_parser("product", help="Create or update a catalog product.")
    p.add_argument("--sku", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--price", required=True, type=_decimal, help="List price (local currency).")
    p.add_argument("--hidden", action="store_true")

    p = sub.add_parser("delete-product", help="Remove a catalog product (history is kept).")
    p.add_argument("sku")

    p = sub.add_parser("revalue", help="Recompute one SKU's stock and average cost.")
    p.add_argument("sku")

    sub.add_parser("recalculate", help="Recompute every derived field from scratch.")

    p = sub.add_parser("stock", help="Show stock and average cost per SKU.")
    p.add_argument("sku", nargs="?", default=None)

    return parser


def _local(amount, policy: CostingPolicy) -> str:
    currency = policy.local_currency
    return fmt_amount(amount, currency.symbol, currency.decimal_places)


def _source(amount, policy: CostingPolicy) -> str:
    currency = policy.source_currency
    return fmt_amount(amount, currency.symbol, currency.decimal_places)


def _run(args: argparse.Namespace, service: LandedCostService, policy: CostingPolicy, today: date) -> None:
    if args.command == "order-total":
        total = service.register_order_total(args.order_number, args.invoiced_total)
        print(f"  Order {total.order_number}: invoiced {_source(total.invoiced_total, policy)}")

    elif args.command == "shipment":
        shipment = service.register_shipment(
            args.tracking_code, args.date or today, args.total_retrieval_cost
        )
        print(f"  {shipment.shipment_key}  {shipment.tracking_code}")
        print(f"    weight {shipment.aggregate_weight} kg  "
              f"factor {_local(shipment.distribution_factor, policy)}/kg")

    elif args.command == "purchase":
        line = service.register_purchase(PurchaseLine(
            order_number=args.order_number,
            sku=args.sku,
            purchase_date=args.date or today,
            supplier=args.supplier,
            quantity_acquired=args.quantity,
            units_per_package=args.units_per_package,
            unit_cost=args.unit_cost,
            exchange_rate=args.exchange_rate,
            weight_kg=args.weight,
            tracking_us=args.tracking_us,
            tracking_py=args.tracking_py,
        ))
        print(f"  {line.line_key}  order {line.order_number}  sku {line.sku}  units {line.total_units}")
        print(f"    lot {_source(line.lot_cost_source, policy)} = {_local(line.lot_cost_local, policy)}")
        print(f"    extra share {_source(line.extra_cost_share, policy)}  "
              f"shipment share {_local(line.shipment_cost_share, policy)}")

    elif args.command == "sale":
        sale = service.register_sale(SaleLine(
            sku=args.sku,
            quantity_sold=args.quantity,
            sale_date=args.date or today,
            customer=args.customer,
            receipt_number=args.receipt,
            notes=args.notes,
        ))
        print(f"  {sale.sale_key}  sku {sale.sku} x{sale.quantity_sold}  "
              f"total {_local(sale.sale_total, policy)}")

    elif args.command == "product":
        product = service.upsert_product(Product(
            sku=args.sku,
            name=args.name,
            list_price=args.price,
            is_visible=not args.hidden,
        ))
        print(f"  {product.sku}  {product.name}  {_local(product.list_price, policy)}")

    elif args.command == "delete-product":
        service.delete_product(args.sku)
        print(f"  Deleted {args.sku}.")

    elif args.command == "revalue":
        valuation = service.revalue_product(args.sku)
        print(f"  {valuation.sku}: stock {valuation.stock}  "
              f"avg cost {_local(valuation.average_unit_cost, policy)}")

    elif args.command == "recalculate":
        summary = service.recalculate_all()
        print(f"  Recalculated {summary.shipments} shipments, {summary.orders} orders "
              f"({summary.purchase_lines} lines), {summary.products} products.")

    elif args.command == "stock":
        report = service.stock_report()
        if args.sku is not None:
            report = {args.sku: report[args.sku]} if args.sku in report else {}
        if not report:
            print("  No inventory history.")
        for valuation in report.values():
            flag = "  OVERSOLD" if valuation.is_oversold else ""
            print(f"  {valuation.sku:<20} stock {valuation.stock:>6}  "
                  f"avg {_local(valuation.average_unit_cost, policy):>14}  "
                  f"landed {fmt_money(valuation.total_landed_cost)}{flag}")


def _execute(args: argparse.Namespace, config) -> None:
    policy = build_costing_policy(config)
    init_engine_from_url(args.db_url or config.database.url, echo=config.database.echo)

    if args.command == "init-db":
        create_tables()
        print("  Tables created.")
        return

    with session_scope() as session:
        service = LandedCostService(session, policy=policy)
        _run(args, service, policy, SystemClock().today())


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = get_active_config(args.config)
        configure_logging(level=log_level(config))
        with quiet_logging(args.quiet):
            _execute(args, config)
    except ResaleKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
