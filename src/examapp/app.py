# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from pathlib import Path
from typing import Optional

from argon2 import PasswordHasher
from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from examapp.auth import passwords
from examapp.auth.flow import AuthFlowController, RedirectInstruction, safe_redirect
from examapp.auth.guard import RequestGuard, current_user_optional, require_user
from examapp.auth.session import SessionCodec
from examapp.config import Settings
from examapp.errors import AuthFormError, RedirectRequired
from examapp.infra.database import build_engine, init_db
from examapp.infra.models import User
from examapp.infra.user_store import CredentialStore, SqlCredentialStore

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _render(request: Request, template_name: str, ctx: dict, *, status_code: int = 200):
    """TemplateResponse wrapper with the defaults every page expects."""
    base_ctx = {"redirect_to": "/", "error": None, "field_errors": {}, "fields": {}}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _redirect(instruction: RedirectInstruction) -> RedirectResponse:
    resp = RedirectResponse(url=instruction.location, status_code=303)
    instruction.set_cookie.apply(resp)
    return resp


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[CredentialStore] = None,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """Build the application.

    The session codec is created first so a missing secret stops startup
    before anything else happens.
    """
    settings = settings or Settings.from_env()
    codec = SessionCodec(
        settings.session_secrets,
        salt=settings.session_salt,
        max_age=settings.session_max_age,
        secure=settings.cookie_secure,
    )
    if store is None:
        engine = build_engine(settings.database_url)
        init_db(engine)
        store = SqlCredentialStore(engine)
    if hasher is None:
        hasher = passwords.make_hasher(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    app = FastAPI()
    app.state.settings = settings
    app.state.codec = codec
    app.state.store = store
    app.state.controller = AuthFlowController(store, codec, hasher=hasher)
    app.state.guard = RequestGuard(codec, store)

    @app.exception_handler(RedirectRequired)
    async def _redirect_required(request: Request, exc: RedirectRequired):
        resp = RedirectResponse(url=exc.location, status_code=303)
        if exc.cookie is not None:
            exc.cookie.apply(resp)
        return resp

    # ------------------ Routes ------------------

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request, redirectTo: str = "/"):
        if current_user_optional(request):
            return RedirectResponse(url="/", status_code=303)
        return _render(request, "login.html", {"redirect_to": safe_redirect(redirectTo)})

    @app.post("/login")
    def login_post(
        request: Request,
        authType: Optional[str] = Form(None),
        loginType: Optional[str] = Form(None),
        email: str = Form(""),
        password: str = Form(""),
        redirectTo: str = Form("/"),
    ):
        form = {
            "authType": authType,
            "loginType": loginType,
            "email": email,
            "password": password,
            "redirectTo": redirectTo,
        }
        try:
            instruction = app.state.controller.handle_submission(form)
        except AuthFormError as e:
            ctx = {
                "redirect_to": safe_redirect(e.fields.get("redirectTo")),
                "error": e.message,
                "error_kind": e.kind.value,
                "field_errors": e.field_errors,
                "fields": e.fields,
            }
            return _render(request, "login.html", ctx, status_code=400)
        return _redirect(instruction)

    @app.post("/logout")
    def logout_post(request: Request):
        instruction = app.state.guard.logout(request)
        return _redirect(instruction)

    @app.get("/logout")
    def logout_get(request: Request):
        return logout_post(request)

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request, user: User = Depends(require_user)):
        return _render(request, "index.html", {"user": user})

    return app
