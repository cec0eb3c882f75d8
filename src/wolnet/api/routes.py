"""FastAPI routes for the wolnet web UI and API."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.security import HTTPBasic
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response, StreamingResponse

from wolnet import __version__
from wolnet.api.models import MachineResponse, MachinesResponse, WakeRequest, WakeResponse
from wolnet.auth.session import (
    FLASH_COOKIE,
    check_basic_auth,
    generate_secret,
    make_flash_cookie,
    read_flash_cookie,
)
from wolnet.config.loader import Settings
from wolnet.core.errors import WakeError
from wolnet.core.mac import MacAddressError
from wolnet.core.machine import Machine, find_machine

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"

_basic_auth = HTTPBasic(auto_error=False)


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Require HTTP Basic credentials when a password is configured."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        settings: Settings = request.app.state.settings
        if not settings.password:
            return await call_next(request)

        try:
            credentials = await _basic_auth(request)
        except HTTPException:
            # Malformed Basic header (bad base64, no colon).
            credentials = None
        if check_basic_auth(credentials, settings.password):
            return await call_next(request)

        return PlainTextResponse(
            "Unauthorized",
            status_code=401,
            headers={"WWW-Authenticate": 'Basic realm="Restricted"'},
        )


async def status_events(
    request: Request,
    poll: Callable[[], dict[str, str]],
    interval: float,
) -> AsyncIterator[str]:
    """
    Yield server-sent events carrying the status of every machine.

    The first event is sent right away, then one every ``interval`` seconds
    until the client goes away. Each poll runs in a worker thread.
    """
    while not await request.is_disconnected():
        statuses = await asyncio.to_thread(poll)
        yield f"data: {json.dumps(statuses)}\n\n"
        await asyncio.sleep(interval)


def create_app(config_path: Optional[str] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config_path: Path to wolnet config.yaml. If None, uses the default location.

    Returns:
        FastAPI application instance
    """
    from wolnet.config.loader import (
        load_config,
        machines_from_config,
        settings_from_config,
        validate_config,
    )

    _config_path = Path(config_path) if config_path else Path.home() / ".config/wolnet/config.yaml"

    app = FastAPI(
        title="wolnet",
        version=__version__,
        description="Wake machines on the network with Wake-on-LAN",
    )

    # ── App state ─────────────────────────────────────────────────────────────
    app.state.config_path = _config_path
    app.state.machines = []
    app.state.settings = Settings()

    raw = load_config(_config_path) if _config_path.exists() else None
    if raw:
        errors = validate_config(raw)
        if errors:
            logger.warning("Config validation errors: %s", errors)
        else:
            app.state.machines = machines_from_config(raw)
            app.state.settings = settings_from_config(raw)
    else:
        logger.warning("Config not found or empty at %s — running without machines", _config_path)

    app.state.secret = app.state.settings.secret or generate_secret()

    app.add_middleware(BasicAuthMiddleware)
    templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

    # ── Helpers ────────────────────────────────────────────────────────────────

    def _find(name: str) -> Optional[Machine]:
        return find_machine(app.state.machines, name)

    def _poll() -> dict[str, str]:
        from wolnet.core.status import poll_all

        return poll_all(app.state.machines, privileged=app.state.settings.privileged)

    def _wake(machine: Machine) -> list[str]:
        from wolnet.core.wol import wake

        return wake(machine)

    # ── HTML ──────────────────────────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> Response:
        flash = read_flash_cookie(request.cookies.get(FLASH_COOKIE, ""), app.state.secret)
        resp = templates.TemplateResponse(
            request,
            "index.html",
            {
                "machines": app.state.machines,
                "version": __version__,
                "flash_message": flash,
            },
        )
        if FLASH_COOKIE in request.cookies:
            resp.delete_cookie(FLASH_COOKIE, path="/")
        return resp

    @app.post("/wake")
    async def post_wake(name: str = Form("")) -> Response:
        machine = _find(name)
        if machine is None:
            return PlainTextResponse("Machine not found", status_code=400)

        logger.info("Wake requested for %s (%s)", machine.name, machine.mac)
        try:
            await asyncio.to_thread(_wake, machine)
        except MacAddressError as exc:
            return PlainTextResponse(str(exc), status_code=400)
        except WakeError as exc:
            logger.error("Error sending magic packet to %s: %s", machine.name, exc)
            return PlainTextResponse(str(exc), status_code=500)

        resp = RedirectResponse("/", status_code=303)
        resp.set_cookie(
            FLASH_COOKIE,
            make_flash_cookie(
                app.state.secret,
                f"Wake-up signal sent to {machine.name}. The machine should wake up shortly.",
            ),
            path="/",
            httponly=True,
            samesite="lax",
        )
        return resp

    # ── Live status (server-sent events) ──────────────────────────────────────

    @app.get("/status")
    async def get_status(request: Request) -> StreamingResponse:
        return StreamingResponse(
            status_events(request, _poll, app.state.settings.status_interval),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    # ── JSON API ──────────────────────────────────────────────────────────────

    @app.get("/api/machines", response_model=MachinesResponse)
    async def get_machines() -> MachinesResponse:
        return MachinesResponse(
            machines=[
                MachineResponse(name=m.name, mac=m.mac, ip=m.ip) for m in app.state.machines
            ]
        )

    @app.post("/api/wake", response_model=None)
    async def post_api_wake(req: WakeRequest) -> JSONResponse:
        machine = _find(req.name)
        if machine is None:
            return JSONResponse({"error": f"Machine '{req.name}' not found"}, status_code=404)
        try:
            targets = await asyncio.to_thread(_wake, machine)
        except MacAddressError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        except WakeError as exc:
            logger.error("Error sending magic packet to %s: %s", machine.name, exc)
            return JSONResponse({"error": str(exc)}, status_code=500)
        return JSONResponse(
            WakeResponse(status="sent", name=machine.name, targets=targets).model_dump()
        )

    return app
