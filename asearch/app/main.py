from __future__ import annotations

import argparse
import logging
import os
import secrets
import socket
import sys
import threading
import time
import traceback

import uvicorn
from PySide6.QtWidgets import QApplication

from asearch.server import api as api_module
from asearch.app import config
from asearch.app.ui.main_window import MainWindow


# ASEARCH_DEBUG      - DEBUG level logging for all modules
# ASEARCH_HOST       - interface for the local API server (default 127.0.0.1)
# ASEARCH_PORT       - preferred API port (default 8765, 0 = ephemeral)
# UVICORN_LOG_LEVEL  - uvicorn's own log level (default warning)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ASearch: jump to workspace files by name.")
    parser.add_argument("--workspace", help="Workspace folder to index at startup.")
    parser.add_argument("--port", type=int, help="Preferred API port (0 = auto-select).")
    parser.add_argument("--host", default=config.load_host(), help="Host/interface to bind the API server.")
    return parser.parse_args(argv)


def _configure_logging() -> None:
    level = logging.DEBUG if config.env_flag("ASEARCH_DEBUG") else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _diag(msg: str) -> None:
    """Lightweight diagnostic logger for startup/teardown events."""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    print(f"[ASearchDiag {timestamp}] {msg}", file=sys.stderr)


def _pick_api_port(host: str, preferred: int) -> int:
    """Bind-test ``preferred`` on ``host``; an unavailable port yields an ephemeral one."""
    if preferred:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, preferred))
            return sock.getsockname()[1]
        except OSError:
            _diag(f"Port {preferred} on {host} is busy; using an ephemeral port.")
        finally:
            sock.close()
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, 0))
        return sock.getsockname()[1]
    finally:
        sock.close()


def _start_api_server(host: str, preferred_port: int | None) -> tuple[int, uvicorn.Server]:
    preferred = preferred_port if preferred_port is not None else config.load_port()
    port = _pick_api_port(host, preferred)
    server_config = uvicorn.Config(
        api_module.get_app(),
        host=host,
        port=port,
        log_level=os.getenv("UVICORN_LOG_LEVEL", "warning"),
        log_config=None,
    )
    server = uvicorn.Server(server_config)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    # Give the event loop a moment to bind the socket before the UI fires requests.
    time.sleep(0.2)
    return port, server


def main() -> None:
    args = _parse_args(sys.argv[1:])
    _configure_logging()
    start_ts = time.time()
    _diag("Application starting.")
    config.init_settings()
    local_ui_token = secrets.token_urlsafe(32)
    api_module.set_local_ui_token(local_ui_token)
    port, server = _start_api_server(args.host, args.port)
    _diag(f"API server started on {args.host}:{port}.")
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("ASearch")
    qt_app.aboutToQuit.connect(lambda: setattr(server, "should_exit", True))
    window = MainWindow(api_base=f"http://{args.host}:{port}", local_auth_token=local_ui_token)
    window.resize(640, 200)
    try:
        if window.startup(workspace_hint=args.workspace):
            window.show()
            rc = qt_app.exec()
            _diag(f"Qt event loop exited with code {rc} after {time.time() - start_ts:.2f}s.")
            sys.exit(rc)
        else:
            _diag("No workspace selected; quitting.")
            qt_app.quit()
    except Exception as exc:
        _diag(f"Unhandled exception after {time.time() - start_ts:.2f}s: {exc}")
        traceback.print_exc()
        qt_app.quit()
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
