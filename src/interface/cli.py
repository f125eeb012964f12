from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from datetime import date

from analytics._periods import previous_month
from analytics.aggregator import category_breakdown, monthly_overview, transactions_in_month
from analytics.insights import generate_insights
from application.auth import AuthService
from application.dashboard import DashboardService
from application.transactions import TransactionService
from infrastructure.persistence.json_store import JsonDocumentStore
from infrastructure.persistence.store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: DocumentStore
    auth: AuthService
    transactions: TransactionService
    dashboard: DashboardService


def build_services(store: DocumentStore | None = None, auth: AuthService | None = None) -> Services:
    store = store or JsonDocumentStore()
    return Services(
        store=store,
        auth=auth or AuthService(store),
        transactions=TransactionService(store),
        dashboard=DashboardService(store),
    )


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from interface.api import create_app

    app = create_app(build_services(JsonDocumentStore(args.db_file)))
    uvicorn.run(app, host=args.host, port=args.port, log_level=os.getenv("LOG_LEVEL", "info").lower())
    return 0


def _cmd_init_db(args: argparse.Namespace) -> int:
    store = JsonDocumentStore(args.db_file)
    if store.initialize():
        print(f"Created {store.path}")
    else:
        print(f"{store.path} already exists")
    return 0


def _cmd_summary(args: argparse.Namespace) -> int:
    document = JsonDocumentStore(args.db_file).load()
    account = document.find_account_by_email(args.email)
    if account is None:
        print(f"No account for {args.email}")
        return 1

    today = date.today()
    year = args.year or today.year
    month = args.month or today.month
    prev_year, prev_month = previous_month(year, month)
    rows = document.transactions_for(account.id)

    current = monthly_overview(rows, month, year)
    previous = monthly_overview(rows, prev_month, prev_year)
    breakdown = category_breakdown(transactions_in_month(rows, month, year), document.categories)
    payload = {
        "overview": current.model_dump(mode="json", by_alias=True),
        "categories": [row.model_dump(mode="json", by_alias=True) for row in breakdown if row.total > 0],
        "insights": [i.model_dump(mode="json", by_alias=True) for i in generate_insights(current, previous, breakdown)],
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="granazero", description="Grana Zero personal finance service")
    parser.add_argument("--db-file", default=None, help="JSON document path (defaults to $GRANA_DB_FILE)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")))
    serve.set_defaults(func=_cmd_serve)

    init_db = sub.add_parser("init-db", help="Create the JSON document with default categories")
    init_db.set_defaults(func=_cmd_init_db)

    summary = sub.add_parser("summary", help="Print one account's monthly overview and insights")
    summary.add_argument("email")
    summary.add_argument("--month", type=int, choices=range(1, 13), metavar="1-12")
    summary.add_argument("--year", type=int)
    summary.set_defaults(func=_cmd_summary)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
