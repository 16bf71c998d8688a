"""Application entry point. Wires the store, sync engine and usage service."""

import logging
import signal
import sys

import orjson
from PySide6.QtCore import QCoreApplication
from PySide6.QtNetwork import QLocalServer, QLocalSocket

from llm_usage_tracker.services.config_manager import ConfigManager
from llm_usage_tracker.services.sync_engine import SyncEngine
from llm_usage_tracker.services.usage_service import UsageService
from llm_usage_tracker.services.usage_store import UsageStore

SOCKET_NAME = "llm-usage-tracker-instance"


def _check_single_instance() -> QLocalServer | None:
    """Enforce single instance via QLocalSocket. Returns server if we're the first instance."""
    socket = QLocalSocket()
    socket.connectToServer(SOCKET_NAME)
    if socket.waitForConnected(500):
        # Another instance is running
        socket.close()
        return None

    server = QLocalServer()
    server.removeServer(SOCKET_NAME)
    server.listen(SOCKET_NAME)
    return server


def _print_usage(usage: dict):
    sys.stdout.buffer.write(orjson.dumps(usage, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def run() -> int:
    """Sync all providers once and print the usage snapshot as JSON."""
    app = QCoreApplication(sys.argv)
    app.setApplicationName("LLM Usage Tracker")
    app.setOrganizationName("llm-usage-tracker")

    instance_server = _check_single_instance()
    if instance_server is None:
        print("Another instance is already running.", file=sys.stderr)
        return 0

    # Allow Ctrl+C to kill the app
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    store = UsageStore()
    config = ConfigManager(store)
    logging.basicConfig(
        level=logging.DEBUG if config.get_bool("debugLogging") else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    engine = SyncEngine(store)
    service = UsageService(engine, config)

    exit_code = 0

    def on_failed(message: str):
        nonlocal exit_code
        print(f"Sync failed: {message}", file=sys.stderr)
        exit_code = 1
        app.quit()

    def on_updated(usage: dict):
        _print_usage(usage)
        app.quit()

    service.usage_updated.connect(on_updated)
    service.sync_failed.connect(on_failed)
    service.refresh_async()

    app.exec()
    service.cleanup()
    store.close()
    instance_server.close()
    return exit_code
