from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from chocoblitz.config import settings
from chocoblitz.constants import CATEGORIES, FILTER_ALL, LOG_FORMAT
from chocoblitz.services.auth_api import AuthError
from chocoblitz.storefront import CheckoutError, Storefront
from chocoblitz.utils.formatters import money, stars
from chocoblitz.utils.validators import FormError
from chocoblitz.web.panels import CartPanel

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["money"] = money
templates.env.filters["stars"] = stars


def _redirect(path: str, **params: Any) -> RedirectResponse:
    query = urlencode({k: v for k, v in params.items() if v not in (None, "")})
    url = f"{path}?{query}" if query else path
    return RedirectResponse(url=url, status_code=303)


def _store(request: Request) -> Storefront:
    return request.app.state.storefront


def _panel(request: Request) -> CartPanel:
    return request.app.state.cart_panel


def _render(request: Request, name: str, ctx: dict[str, Any]) -> HTMLResponse:
    store = _store(request)
    base = {
        "request": request,
        "user": store.session.get_current_user(),
        "cart": _panel(request),
        "categories": CATEGORIES,
    }
    base.update(ctx)
    return templates.TemplateResponse(request, name, base)


def _anonymous(request: Request) -> Optional[RedirectResponse]:
    if not _store(request).session.is_authenticated():
        return _redirect("/")
    return None


def attach_storefront(app: FastAPI, storefront: Storefront) -> None:
    previous = getattr(app.state, "cart_panel", None)
    if previous is not None:
        previous.close()
    app.state.storefront = storefront
    app.state.cart_panel = CartPanel(storefront.cart)


def create_app(storefront: Optional[Storefront] = None) -> FastAPI:
    app = FastAPI(title="Chocoblitz Storefront")

    if storefront is not None:
        attach_storefront(app, storefront)
    else:
        @app.on_event("startup")
        def _startup() -> None:
            logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
            attach_storefront(app, Storefront.from_settings())

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    # ---------------- page ----------------

    @app.get("/", response_class=HTMLResponse)
    def index(
        request: Request,
        filter: str = FILTER_ALL,
        msg: str = "",
        tab: str = "login",
        error: str = "",
    ):
        store = _store(request)
        if not store.session.is_authenticated():
            return _render(request, "auth.html", {"tab": tab, "error": error})

        if filter != FILTER_ALL and filter not in CATEGORIES:
            filter = FILTER_ALL
        return _render(
            request,
            "index.html",
            {
                "products": store.catalog.filter(filter),
                "filters": store.catalog.categories(),
                "selected_filter": filter,
                "reviews": store.reviews.reviews,
                "message": msg,
            },
        )

    @app.get("/products/{product_id}", response_class=HTMLResponse)
    def product_detail(request: Request, product_id: int):
        guard = _anonymous(request)
        if guard:
            return guard
        product = _store(request).catalog.find_by_id(product_id)
        if product is None:
            raise HTTPException(status_code=404, detail="Product not found")
        return _render(request, "lightbox.html", {"product": product})

    # ---------------- auth ----------------

    @app.post("/auth/login")
    async def auth_login(
        request: Request,
        email: str = Form(""),
        password: str = Form(""),
        remember_me: bool = Form(False),
    ):
        try:
            await _store(request).session.login(email, password, remember_me)
        except (FormError, AuthError) as e:
            return _redirect("/", tab="login", error=str(e))
        return _redirect("/")

    @app.post("/auth/signup")
    async def auth_signup(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        password: str = Form(""),
        confirm_password: str = Form(""),
        agree_terms: bool = Form(False),
    ):
        try:
            await _store(request).session.register(name, email, password, confirm_password, agree_terms)
        except (FormError, AuthError) as e:
            return _redirect("/", tab="signup", error=str(e))
        return _redirect("/")

    @app.post("/auth/logout")
    async def auth_logout(request: Request):
        _store(request).logout()
        return _redirect("/")

    # ---------------- cart ----------------
    # mutating routes are coroutines so they run one at a time on the event loop

    @app.get("/api/cart")
    def cart_json(request: Request):
        guard = _anonymous(request)
        if guard:
            return JSONResponse({"detail": "Unauthorized"}, status_code=401)
        return _panel(request).as_dict()

    @app.post("/cart/add")
    async def cart_add(request: Request, product_id: int = Form(...)):
        guard = _anonymous(request)
        if guard:
            return guard
        _store(request).cart.add_item(product_id)
        return _redirect("/")

    @app.post("/cart/remove")
    async def cart_remove(request: Request, product_id: int = Form(...)):
        guard = _anonymous(request)
        if guard:
            return guard
        _store(request).cart.remove_item(product_id)
        return _redirect("/")

    @app.post("/cart/update")
    async def cart_update(request: Request, product_id: int = Form(...), delta: int = Form(...)):
        guard = _anonymous(request)
        if guard:
            return guard
        _store(request).cart.update_quantity(product_id, delta)
        return _redirect("/")

    @app.get("/cart/clear", response_class=HTMLResponse)
    def cart_clear_confirm(request: Request):
        guard = _anonymous(request)
        if guard:
            return guard
        return _render(request, "confirm_clear.html", {})

    @app.post("/cart/clear")
    async def cart_clear(request: Request, confirm: str = Form("no")):
        guard = _anonymous(request)
        if guard:
            return guard
        if confirm.strip().lower() != "yes":
            return _redirect("/")
        _store(request).cart.clear()
        return _redirect("/", msg="Cart cleared")

    @app.post("/checkout")
    async def checkout(request: Request):
        guard = _anonymous(request)
        if guard:
            return guard
        try:
            receipt = _store(request).checkout()
        except CheckoutError as e:
            return _redirect("/", msg=str(e))
        return _redirect("/", msg=receipt.message)

    # ---------------- reviews / contact ----------------

    @app.post("/reviews")
    async def reviews_add(
        request: Request,
        name: str = Form(""),
        location: str = Form(""),
        rating: int = Form(5),
        text: str = Form(""),
    ):
        guard = _anonymous(request)
        if guard:
            return guard
        try:
            _store(request).reviews.submit(name, location, rating, text)
        except FormError as e:
            return _redirect("/", msg=str(e))
        return _redirect("/")

    @app.post("/contact")
    async def contact(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        message: str = Form(""),
    ):
        guard = _anonymous(request)
        if guard:
            return guard
        try:
            reply = _store(request).contact.submit(name, email, message)
        except FormError as e:
            return _redirect("/", msg=str(e))
        return _redirect("/", msg=reply)


app = create_app()
