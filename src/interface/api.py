from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from domain.errors import LedgerError, StoreError
from domain.models import Account
from domain.schemas import LoginRequest, RegisterRequest, TransactionCreate, TransactionFilters
from interface.cli import Services, build_services

logger = logging.getLogger(__name__)

API_VERSION = "2.0.0"

_bearer = HTTPBearer(auto_error=False)


def _services(request: Request) -> Services:
    return request.app.state.services


def current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Account:
    token = credentials.credentials if credentials else None
    return _services(request).auth.authenticate(token)


def _ok(data: Any = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"success": True, **extra}
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body)


def _dump(model: Any) -> Any:
    return model.model_dump(mode="json", by_alias=True)


INDEX_HTML = """
<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Grana Zero</title>
    <style>
      body { font-family: system-ui, sans-serif; margin: 2rem auto; max-width: 720px; }
      .row { display: flex; gap: .5rem; margin-bottom: .5rem; }
      #result { background: #0f172a; color: #e2e8f0; padding: .75rem; white-space: pre-wrap; }
    </style>
  </head>
  <body>
    <h1>Grana Zero</h1>
    <p>Minimal test UI for the dashboard endpoints.</p>
    <form id="login-form">
      <div class="row">
        <div>
          <label for="email">Email</label>
          <input id="email" name="email" type="email" />
        </div>
        <div>
          <label for="password">Password</label>
          <input id="password" name="password" type="password" />
        </div>
      </div>
      <button type="submit">Log in</button>
    </form>
    <p>
      <button data-path="/api/dashboard/overview">Overview</button>
      <button data-path="/api/ai/insights">Insights</button>
      <button data-path="/api/transactions">Transactions</button>
    </p>
    <h2>Response</h2>
    <pre id="result">Log in first.</pre>
    <script>
      let token = null;
      const result = document.getElementById('result');
      const show = async (res) => { result.textContent = JSON.stringify(await res.json(), null, 2); };
      document.getElementById('login-form').addEventListener('submit', async (e) => {
        e.preventDefault();
        const form = e.target;
        const res = await fetch('/api/auth/login', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ email: form.email.value, password: form.password.value })
        });
        const data = await res.clone().json();
        token = data.token || null;
        await show(res);
      });
      document.querySelectorAll('button[data-path]').forEach((btn) => {
        btn.addEventListener('click', async () => {
          const res = await fetch(btn.dataset.path, { headers: { 'Authorization': `Bearer ${token}` } });
          await show(res);
        });
      });
    </script>
  </body>
</html>
"""


def create_app(services: Services | None = None) -> FastAPI:
    app = FastAPI(title="Grana Zero API", version=API_VERSION)
    app.state.services = services or build_services()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.message)
            return JSONResponse(
                status_code=exc.status_code,
                content={"success": False, "error": "Internal server error", "code": "SERVER_ERROR"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message, "code": exc.code},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": f"{location}: {first.get('msg', 'invalid request')}",
                "code": "INVALID_REQUEST",
            },
        )

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return INDEX_HTML

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {
            "success": True,
            "message": "Grana Zero API is up",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": API_VERSION,
        }

    @app.post("/api/auth/register")
    def register(body: RegisterRequest, request: Request) -> JSONResponse:
        result = _services(request).auth.register(body)
        return _ok(status_code=201, message="Account created", **_dump(result))

    @app.post("/api/auth/login")
    def login(body: LoginRequest, request: Request) -> JSONResponse:
        result = _services(request).auth.login(body)
        return _ok(message="Welcome back", **_dump(result))

    @app.get("/api/dashboard/overview")
    def dashboard_overview(request: Request, account: Account = Depends(current_account)) -> JSONResponse:
        return _ok(_dump(_services(request).dashboard.overview(account)))

    @app.get("/api/ai/insights")
    def ai_insights(request: Request, account: Account = Depends(current_account)) -> JSONResponse:
        return _ok(_dump(_services(request).dashboard.insights(account)))

    @app.get("/api/transactions")
    def list_transactions(
        request: Request,
        account: Account = Depends(current_account),
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        kind: Optional[Literal["income", "expense"]] = Query(None, alias="type"),
        category: Optional[str] = None,
        start_date: Optional[datetime] = Query(None, alias="startDate"),
        end_date: Optional[datetime] = Query(None, alias="endDate"),
    ) -> JSONResponse:
        filters = TransactionFilters(
            page=page,
            limit=limit,
            kind=kind,
            category_id=category,
            start_date=start_date,
            end_date=end_date,
        )
        result = _dump(_services(request).transactions.list_page(account, filters))
        transactions = result.pop("transactions")
        return _ok({"transactions": transactions, "stats": result})

    @app.post("/api/transactions")
    def create_transaction(
        body: TransactionCreate,
        request: Request,
        account: Account = Depends(current_account),
    ) -> JSONResponse:
        txn = _services(request).transactions.create(account, body)
        return _ok({"transaction": _dump(txn)}, status_code=201, message="Transaction added")

    @app.get("/api/categories")
    def list_categories(request: Request, account: Account = Depends(current_account)) -> JSONResponse:
        categories = _services(request).dashboard.categories(account)
        return _ok({"categories": [_dump(c) for c in categories]})

    return app


app = create_app()
