"""
Signal Shutdown Tests

The served process tears the session down exactly once per run, and
exits within the shutdown budget even with a request stuck in flight.
"""

import os
import signal
import socket
import subprocess
import sys
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import uvicorn

from main import GatewayServer, create_app

PROJECT_ROOT = Path(__file__).resolve().parents[2]

SERVE_SCRIPT = '''
import asyncio
import sys

from main import create_app, run_server
from session.manager import SessionManager
from session.stub import StubWhatsAppClient
from transport.whatsapp.throttle import NoDelay


class MarkedClient(StubWhatsAppClient):
    async def is_registered_user(self, identifier):
        if identifier.startswith("1999"):
            print("LOOKUP_STARTED", flush=True)
            await asyncio.Event().wait()
        return await super().is_registered_user(identifier)

    async def destroy(self):
        print("DESTROY_CALLED", flush=True)
        await super().destroy()


session = SessionManager(MarkedClient(), shutdown_timeout=0.5, qr_renderer=lambda qr: None)
app = create_app(session=session, throttle=NoDelay())
run_server(app, "127.0.0.1", int(sys.argv[1]), shutdown_timeout=0.5)
'''

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")


def free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def served(tmp_path):
    """A running server process and its base URL, once the session is ready."""
    script = tmp_path / "serve.py"
    script.write_text(SERVE_SCRIPT)
    port = free_port()
    env = dict(os.environ, PYTHONPATH=str(PROJECT_ROOT), LOG_LEVEL="INFO")

    proc = subprocess.Popen(
        [sys.executable, str(script), str(port)],
        cwd=tmp_path,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    base_url = f"http://127.0.0.1:{port}"

    deadline = time.monotonic() + 20
    while True:
        try:
            if httpx.get(f"{base_url}/health", trust_env=False).json()["whatsappReady"]:
                break
        except httpx.HTTPError:
            pass
        if proc.poll() is not None or time.monotonic() > deadline:
            proc.kill()
            _, err = proc.communicate()
            pytest.fail(f"server did not become ready:\n{err.decode()}")
        time.sleep(0.05)

    yield proc, base_url

    if proc.poll() is None:
        proc.kill()
        proc.communicate()


class TestExitSignals:
    """SIGINT handling of the served process."""

    def test_two_quick_sigints_tear_down_once(self, served):
        proc, _ = served

        proc.send_signal(signal.SIGINT)
        time.sleep(0.02)
        proc.send_signal(signal.SIGINT)
        out, err = proc.communicate(timeout=15)

        assert proc.returncode == 0, err.decode()
        assert out.decode().count("DESTROY_CALLED") == 1
        assert "Shutting down gracefully" in err.decode()

    def test_hung_request_does_not_hold_the_process(self, served):
        proc, base_url = served

        def stuck_request():
            try:
                httpx.post(
                    f"{base_url}/check-number", json={"number": "19990000000"},
                    timeout=20, trust_env=False,
                )
            except httpx.HTTPError:
                pass

        threading.Thread(target=stuck_request, daemon=True).start()
        assert proc.stdout.readline().strip() == b"LOOKUP_STARTED"

        started = time.monotonic()
        proc.send_signal(signal.SIGINT)
        out, err = proc.communicate(timeout=15)

        assert time.monotonic() - started < 5
        assert proc.returncode == 0, err.decode()
        assert out.decode().count("DESTROY_CALLED") == 1


class TestGatewayServer:
    """Signal bookkeeping without a running server."""

    def test_only_first_signal_starts_shutdown(self):
        app = create_app()
        server = GatewayServer(uvicorn.Config(app), app)
        server._serve_loop = MagicMock()

        server.handle_exit(signal.SIGINT, None)
        server.handle_exit(signal.SIGINT, None)
        server.handle_exit(signal.SIGTERM, None)

        assert server.exit_signals == 3
        assert server.should_exit is True
        assert server.force_exit is False
        server._serve_loop.call_soon_threadsafe.assert_called_once_with(
            server._begin_shutdown, signal.SIGINT
        )
