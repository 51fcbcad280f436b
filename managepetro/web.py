"""Browser-based dashboard for the ManagePetro order-management product."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional

import anyio
from fastapi import FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api_client import APIError, AuthorizationError, OrderDirectoryClient
from .auth import AuthenticationClient
from .config import Settings, load_settings
from .models import ClientOption, SessionUser
from .resources import client_option, format_date, status_variant
from .sessions import (
    SESSION_COOKIE_NAME,
    clear_session,
    consume_flash,
    flash,
    invalidate_session,
    read_session_user,
    store_session_user,
)


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."

logger = logging.getLogger("managepetro.web")


def _parse_page(value: Optional[str]) -> int:
    try:
        page = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return page if page > 1 else 1


def _validate_order_form(client: str, fuel_amount: str, delivery_address: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not client:
        errors["client"] = "Client is required"
    if not fuel_amount:
        errors["fuel_amount"] = "Fuel amount is required"
    else:
        try:
            amount = Decimal(fuel_amount)
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            errors["fuel_amount"] = "Enter a valid number"
    if not delivery_address:
        errors["delivery_address"] = "Delivery address is required"
    return errors


def create_app(*, settings: Optional[Settings] = None) -> FastAPI:
    """Create the dashboard web application."""

    if settings is None:
        settings = load_settings()

    if settings.using_development_secret:
        logger.warning(
            "MANAGEPETRO_SESSION_SECRET is not set; using the insecure development secret. "
            "Never run this configuration in production."
        )

    app = FastAPI(
        title="ManagePetro Dashboard",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=list(settings.trusted_proxies))
    app.state.settings = settings

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        https_only=settings.session_secure,
        same_site="lax",
        max_age=settings.session_max_age,
    )

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    templates.env.filters["status_variant"] = status_variant
    templates.env.filters["format_date"] = format_date

    authenticator = AuthenticationClient(
        settings.api_base_url,
        login_path=settings.login_path,
        timeout=settings.api_timeout,
    )

    def _order_client(user: SessionUser) -> OrderDirectoryClient:
        return OrderDirectoryClient(
            settings.api_base_url,
            user.access_token,
            timeout=settings.api_timeout,
        )

    def _redirect(request: Request, name: str) -> RedirectResponse:
        return RedirectResponse(
            request.url_for(name),
            status_code=status.HTTP_303_SEE_OTHER,
        )

    def _redirect_to_login(request: Request) -> RedirectResponse:
        return _redirect(request, "show_login")

    def _expired(request: Request) -> RedirectResponse:
        invalidate_session(request.session, SESSION_EXPIRED_MESSAGE)
        return _redirect_to_login(request)

    def _render(request: Request, template: str, context: Dict[str, object], *, status_code: int = 200):
        context.setdefault("messages", consume_flash(request.session))
        return templates.TemplateResponse(request, template, context, status_code=status_code)

    async def _load_client_options(user: SessionUser) -> List[ClientOption]:
        clients = await anyio.to_thread.run_sync(_order_client(user).list_clients)
        return [client_option(client) for client in clients]

    def _render_order_form(
        request: Request,
        user: SessionUser,
        *,
        options: List[ClientOption],
        clients_error: Optional[str],
        values: Dict[str, str],
        errors: Dict[str, str],
        form_error: Optional[str] = None,
        status_code: int = 200,
    ):
        return _render(
            request,
            "order_new.html",
            {
                "user": user,
                "active": "new_order",
                "client_options": options,
                "clients_error": clients_error,
                "values": values,
                "errors": errors,
                "form_error": form_error,
            },
            status_code=status_code,
        )

    @app.get("/", response_class=HTMLResponse)
    async def root(request: Request):
        user = read_session_user(request.session)
        if user is None:
            return _redirect_to_login(request)
        return _redirect(request, "dashboard")

    @app.get("/login", response_class=HTMLResponse, name="show_login")
    async def login_form(request: Request):
        user = read_session_user(request.session)
        if user is not None:
            return _redirect(request, "dashboard")
        error = request.session.pop("login_error", None)
        return _render(
            request,
            "login.html",
            {"error": error, "errors": {}, "email": request.session.pop("login_email", "")},
        )

    @app.post("/login", name="process_login")
    async def process_login(request: Request, email: str = Form(""), password: str = Form("")):
        errors: Dict[str, str] = {}
        if not email.strip():
            errors["email"] = "Email is required"
        if not password:
            errors["password"] = "Password is required"
        if errors:
            return _render(
                request,
                "login.html",
                {"error": None, "errors": errors, "email": email},
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        user = await anyio.to_thread.run_sync(authenticator.authenticate, email, password)
        if user is None:
            request.session["login_error"] = "Invalid email or password."
            request.session["login_email"] = email
            return _redirect_to_login(request)

        store_session_user(request.session, user)
        flash(request.session, "Signed in", category="success")
        return _redirect(request, "dashboard")

    @app.get("/logout", name="logout")
    async def logout(request: Request):
        clear_session(request.session)
        return _redirect_to_login(request)

    @app.post("/logout", name="process_logout")
    async def process_logout(request: Request):
        clear_session(request.session)
        return _redirect_to_login(request)

    @app.get("/dashboard", response_class=HTMLResponse, name="dashboard")
    async def dashboard(request: Request):
        user = read_session_user(request.session)
        if user is None:
            return _redirect_to_login(request)
        return _render(request, "dashboard.html", {"user": user, "active": "overview"})

    @app.get("/dashboard/orders", response_class=HTMLResponse, name="orders")
    async def orders(request: Request, page: Optional[str] = None):
        user = read_session_user(request.session)
        if user is None:
            return _redirect_to_login(request)

        current_page = _parse_page(page)
        try:
            order_page = await anyio.to_thread.run_sync(_order_client(user).list_orders, current_page)
        except AuthorizationError:
            return _expired(request)
        except APIError as exc:
            return _render(
                request,
                "orders.html",
                {"user": user, "active": "orders", "error": exc.message, "order_page": None},
                status_code=status.HTTP_502_BAD_GATEWAY,
            )

        return _render(
            request,
            "orders.html",
            {"user": user, "active": "orders", "error": None, "order_page": order_page},
        )

    @app.get("/dashboard/orders/new", response_class=HTMLResponse, name="new_order")
    async def new_order(request: Request):
        user = read_session_user(request.session)
        if user is None:
            return _redirect_to_login(request)

        clients_error = None
        options: List[ClientOption] = []
        try:
            options = await _load_client_options(user)
        except AuthorizationError:
            return _expired(request)
        except APIError as exc:
            clients_error = exc.message

        return _render_order_form(
            request,
            user,
            options=options,
            clients_error=clients_error,
            values={"client": "", "fuel_amount": "", "delivery_address": "", "notes": ""},
            errors={},
        )

    @app.post("/dashboard/orders/new", name="create_order")
    async def create_order(
        request: Request,
        client: str = Form(""),
        fuel_amount: str = Form(""),
        delivery_address: str = Form(""),
        notes: str = Form(""),
    ):
        user = read_session_user(request.session)
        if user is None:
            flash(request.session, "You're not signed in", category="error")
            return _redirect_to_login(request)

        values = {
            "client": client.strip(),
            "fuel_amount": fuel_amount.strip(),
            "delivery_address": delivery_address.strip(),
            "notes": notes.strip(),
        }
        errors = _validate_order_form(values["client"], values["fuel_amount"], values["delivery_address"])

        form_error = None
        status_code = status.HTTP_400_BAD_REQUEST
        if not errors:
            submit = partial(
                _order_client(user).create_order,
                client=values["client"],
                fuel_amount=values["fuel_amount"],
                delivery_address=values["delivery_address"],
                notes=values["notes"] or None,
            )
            try:
                await anyio.to_thread.run_sync(submit)
            except AuthorizationError:
                return _expired(request)
            except APIError as exc:
                form_error = exc.message
                if exc.status_code is not None and 400 <= exc.status_code < 500:
                    status_code = exc.status_code
                else:
                    status_code = status.HTTP_502_BAD_GATEWAY
            else:
                flash(request.session, "Order created", category="success")
                return _redirect(request, "orders")

        clients_error = None
        options: List[ClientOption] = []
        try:
            options = await _load_client_options(user)
        except AuthorizationError:
            return _expired(request)
        except APIError as exc:
            clients_error = exc.message

        return _render_order_form(
            request,
            user,
            options=options,
            clients_error=clients_error,
            values=values,
            errors=errors,
            form_error=form_error,
            status_code=status_code,
        )

    return app


__all__ = ["create_app"]
