"""
Log Stream Tests
================
WebSocketLogHandler payloads and the /logs endpoint.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from routetrack.Core.log_ws import LogWebSocketManager, WebSocketLogHandler
from routetrack.Core.logging_config import setup_logging
from routetrack.Core.wsBase import WebSocketManager
from routetrack.main import app


class RecordingManager(LogWebSocketManager):

    def __init__(self, connected=True):
        super().__init__()
        self.connected = connected
        self.sent = []

    @property
    def has_clients(self) -> bool:
        return self.connected

    def send_from_thread(self, message):
        self.sent.append(message)
        return True


def _record(level, msg):
    return logging.LogRecord("routetrack.test", level, __file__, 1, msg, None, None)


class TestWebSocketLogHandler:

    def test_payload_shape(self):
        manager = RecordingManager()
        handler = WebSocketLogHandler(manager)
        handler.emit(_record(logging.WARNING, "[TRIP] Trip closed"))

        assert len(manager.sent) == 1
        payload = manager.sent[0]
        assert payload["msg_type"] == "warning"
        assert payload["message"] == "[TRIP] Trip closed"
        assert payload["logger"] == "routetrack.test"
        assert payload["timestamp"].endswith("Z")

    def test_error_level(self):
        manager = RecordingManager()
        WebSocketLogHandler(manager).emit(_record(logging.ERROR, "boom"))
        assert manager.sent[0]["msg_type"] == "error"

    def test_nothing_sent_without_clients(self):
        manager = RecordingManager(connected=False)
        WebSocketLogHandler(manager).emit(_record(logging.INFO, "hello"))
        assert manager.sent == []

    def test_send_from_thread_without_loop(self):
        manager = LogWebSocketManager()
        manager.clients.append(object())
        assert manager.send_from_thread({"msg_type": "log"}) is False


class TestWebSocketManager:

    def test_base_requires_message_handler(self):
        with pytest.raises(TypeError):
            WebSocketManager()

    def test_log_manager_is_concrete(self):
        assert isinstance(LogWebSocketManager(), WebSocketManager)


class TestSetupLogging:

    def test_idempotent(self):
        logger = setup_logging("DEBUG")
        count = len(logger.handlers)
        setup_logging("INFO")
        assert len(logger.handlers) == count
        assert sum(isinstance(h, WebSocketLogHandler) for h in logger.handlers) == 1


class TestLogsEndpoint:

    def test_ping_pong(self):
        with TestClient(app) as client:
            with client.websocket_connect("/logs") as ws:
                ws.send_text("ping")
                assert ws.receive_json() == {"msg_type": "pong"}
