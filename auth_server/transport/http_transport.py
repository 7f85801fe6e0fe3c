"""
HTTP Transport for the Auth Service

Module: transport.http_transport
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] HTTP Transport Implementation
  - aiohttp application with JSON endpoints
  - POST /auth/register, /auth/login, /auth/refresh, /auth/logout
  - GET / health text
  - AuthError -> JSON error body with matching status
  - Periodic sweep of expired refresh tokens

ARCHITECTURE:
HTTPTransport maps HTTP requests onto AuthService calls.
- One aiohttp Application, created by create_app()
- error_middleware renders every AuthError as {"error": ...} (+ extras)
- Unexpected exceptions become 500 "<Operation> failed" and are logged

SECURITY NOTES:
- Request bodies limited to MAX_REQUEST_SIZE
- No TLS here: run behind a terminating proxy
- Secrets and tokens are never logged
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from aiohttp import web

from ..core.auth_service import AuthService
from ..core.config import AuthConfig
from ..core.constants import MAX_REQUEST_SIZE, SERVER_NAME, SERVER_VERSION
from ..core.errors import AuthError, InvalidInput

logger = logging.getLogger("transport.http")


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Render service errors as JSON responses"""
    try:
        return await handler(request)
    except AuthError as e:
        return web.json_response(e.to_dict(), status=e.status)
    except web.HTTPException:
        raise
    except Exception:
        route = request.match_info.route.name or "request"
        logger.error(f"{route} error", exc_info=True)
        return web.json_response(
            {"error": f"{route.capitalize()} failed"},
            status=500,
        )


class HTTPTransport:
    """
    HTTP Transport for the Auth Service

    Typical usage:
        transport = HTTPTransport(service, config)
        await transport.start()
        ...
        await transport.stop()
    """

    def __init__(self, service: AuthService, config: Optional[AuthConfig] = None):
        """
        Initialize HTTP Transport

        Args:
            service: AuthService handling the requests
            config: AuthConfig instance (uses defaults if None)
        """
        self.service = service
        self.config = config or AuthConfig()
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.logger = logging.getLogger("transport.http")
        self.is_running = False
        self._sweep_task: Optional[asyncio.Task] = None

    def create_app(self) -> web.Application:
        """Build the aiohttp application"""
        app = web.Application(
            middlewares=[error_middleware],
            client_max_size=MAX_REQUEST_SIZE,
        )
        app.router.add_get("/", self._http_handler, name="health")
        app.router.add_post("/auth/register", self._register_handler, name="register")
        app.router.add_post("/auth/login", self._login_handler, name="login")
        app.router.add_post("/auth/refresh", self._refresh_handler, name="refresh")
        app.router.add_post("/auth/logout", self._logout_handler, name="logout")
        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def start(self) -> None:
        """Start HTTP server"""
        try:
            self.app = self.create_app()

            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, self.config.host, self.config.port)
            await site.start()

            self.is_running = True
            self.logger.info(
                f"HTTP server started on {self.config.host}:{self.config.port}"
            )
            self.logger.info(
                "Endpoints: POST /auth/register, POST /auth/login, "
                "POST /auth/refresh, POST /auth/logout"
            )

        except Exception as e:
            self.logger.error(f"Server startup failed: {e}")
            self.is_running = False
            raise

    async def stop(self) -> None:
        """Stop HTTP server"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
        self.is_running = False
        self.logger.info("HTTP transport stopped")

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    async def _on_startup(self, app: web.Application) -> None:
        interval = self.config.token_sweep_interval
        if interval > 0:
            self._sweep_task = asyncio.create_task(self._sweep_loop(interval))

    async def _on_cleanup(self, app: web.Application) -> None:
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

    async def _sweep_loop(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.service.sweep_expired()
            except Exception as e:
                self.logger.error(f"Token sweep failed: {e}")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _http_handler(self, request: web.Request) -> web.Response:
        """Handle HTTP GET / request"""
        return web.Response(
            text=f"{SERVER_NAME} {SERVER_VERSION} - POST /auth/register, /auth/login, /auth/refresh\n",
            status=200,
        )

    async def _register_handler(self, request: web.Request) -> web.Response:
        body = await self._read_json(request)
        user = await self.service.register(
            body.get("email"),
            body.get("password"),
            body.get("name"),
        )
        return web.json_response({"message": "Registered", "user": user}, status=201)

    async def _login_handler(self, request: web.Request) -> web.Response:
        body = await self._read_json(request)
        result = await self.service.login(body.get("email"), body.get("password"))
        return web.json_response({
            "message": "Login successful",
            "accessToken": result.access.token,
            "refreshToken": result.refresh.token,
            "expiresIn": result.access.expires_in,
        })

    async def _refresh_handler(self, request: web.Request) -> web.Response:
        body = await self._read_json(request)
        access = await self.service.refresh(body.get("refreshToken"))
        return web.json_response({
            "accessToken": access.token,
            "expiresIn": access.expires_in,
        })

    async def _logout_handler(self, request: web.Request) -> web.Response:
        body = await self._read_json(request)
        await self.service.revoke(body.get("refreshToken"))
        return web.json_response({"message": "Logged out"})

    @staticmethod
    async def _read_json(request: web.Request) -> Dict[str, Any]:
        """
        Parse the request body as a JSON object

        Raises:
            InvalidInput: Body is not valid JSON or not an object
        """
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise InvalidInput("Invalid JSON body")
        if not isinstance(body, dict):
            raise InvalidInput("JSON object required")
        return body
