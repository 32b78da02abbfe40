"""
FastAPI Application Entry Point

Integrates:
  - WhatsApp number checks and image sending
  - Health and status endpoints
  - WhatsApp session lifecycle (startup and graceful shutdown)
  - Middleware for logging & error handling

Run: python main.py
  or: uvicorn main:app --host 0.0.0.0 --port 3000 (uvicorn's own signal handling)
"""

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import Config
from infra.config import get_config
from session.manager import SessionManager
from transport.whatsapp.router import router as whatsapp_router
from transport.whatsapp.throttle import ThrottlePolicy

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_NAME = "WhatsApp Checker API"
API_VERSION = "1.0.0"

ENDPOINTS = {
    "health": "GET /health - Health check",
    "status": "GET /status - WhatsApp client status",
    "check_number": "POST /check-number - Check single number",
    "check_numbers": f"POST /check-numbers - Check multiple numbers (max {Config.MAX_BATCH_SIZE})",
    "send_image": "POST /send-image - Send image (URL) with optional message",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: start the WhatsApp session, tear it down on exit.

    Under GatewayServer the first exit signal has already started the
    session shutdown; the call here waits for it. The session manager
    makes sure teardown runs once and within its timeout.
    """
    # Startup
    infra = get_config()
    if app.state.session is None:
        app.state.session = infra.create_session_manager()
    if app.state.throttle is None:
        app.state.throttle = infra.create_throttle()

    logger.info("=" * 60)
    logger.info(f"🌐 {API_NAME} started on port {app.state.port}")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info(f"Infrastructure: {infra}")
    logger.info("📋 Available endpoints:")
    for description in ENDPOINTS.values():
        logger.info(f"   {description}")
    logger.info("=" * 60)

    try:
        await app.state.session.start()
    except Exception as e:
        # Keep serving: /health and /status report the client as not ready
        logger.error(f"Failed to initialize WhatsApp client: {e}", exc_info=True)

    yield

    # Shutdown
    await app.state.session.shutdown()


def create_app(
    session: Optional[SessionManager] = None,
    throttle: Optional[ThrottlePolicy] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        session: Session manager to serve; built from the environment
            at startup when omitted
        throttle: Batch pacing policy; built from the environment at
            startup when omitted
    """
    app = FastAPI(
        title=API_NAME,
        description="Check WhatsApp registration and send images over HTTP",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.session = session
    app.state.throttle = throttle
    app.state.port = Config.PORT

    # Cross-origin requests from any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": "Internal server error"},
            )

    app.include_router(whatsapp_router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": API_NAME,
            "version": API_VERSION,
            "status": "running",
            "endpoints": ENDPOINTS,
        }

    return app


app = create_app()


class GatewayServer(uvicorn.Server):
    """
    uvicorn server that owns SIGINT/SIGTERM.

    The first signal stops the server and starts the session shutdown
    right away. Later signals are ignored: uvicorn never force-exits
    past the lifespan teardown, and the process exits with status 0.
    """

    def __init__(self, config: uvicorn.Config, app: FastAPI):
        super().__init__(config)
        self.fastapi_app = app
        self.exit_signals = 0
        self._serve_loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_shutdown: Optional[asyncio.Future] = None

    async def serve(self, sockets=None) -> None:
        self._serve_loop = asyncio.get_running_loop()
        await super().serve(sockets=sockets)

    def handle_exit(self, sig: int, frame) -> None:
        # Runs inside the signal handler: only flag and hand over to the loop
        self.exit_signals += 1
        if self.should_exit:
            return
        self.should_exit = True
        if self._serve_loop is not None:
            self._serve_loop.call_soon_threadsafe(self._begin_shutdown, sig)

    def _begin_shutdown(self, sig: int) -> None:
        logger.info(f"Received {signal.Signals(sig).name}, shutting down")
        session = self.fastapi_app.state.session
        if session is not None:
            self._session_shutdown = asyncio.ensure_future(session.shutdown())


def run_server(app: FastAPI, host: str, port: int, shutdown_timeout: float) -> None:
    """
    Serve app until the first exit signal.

    Args:
        app: Application to serve
        host: Interface to bind
        port: Port to bind
        shutdown_timeout: Seconds in-flight requests get before they are
            cancelled; the session teardown runs alongside
    """
    app.state.port = port
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=Config.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=shutdown_timeout,
    )
    GatewayServer(config, app).run()


def main(host: str = Config.HOST, port: int = Config.PORT):
    """Run the API server."""
    if not Config.validate():
        raise SystemExit(1)

    run_server(app, host, port, shutdown_timeout=get_config().shutdown_timeout_ms / 1000)


if __name__ == "__main__":
    main()
