"""
Log WebSocket Management Module
================================

Real-time log streaming for monitoring dashboards. Log records emitted by
any routetrack logger are forwarded to connected ``/logs`` clients through
``WebSocketLogHandler``; trip lifecycle messages (opened, closed) are the
main traffic.

Message Format:
--------------
    {
        "msg_type": "log" | "warning" | "error",
        "message": "[TRIP] Trip opened: TRIP_20250102_user1_3fa85f64 (owner: user-1)",
        "timestamp": "2025-01-02T10:30:00Z",
        "logger": "routetrack.Services.session_manager"
    }

Frontend Connection:
-------------------
    const ws = new WebSocket('ws://localhost:8000/logs');
    ws.onmessage = (event) => {
        const log = JSON.parse(event.data);
        console.log(`[${log.msg_type}] ${log.message}`);
    };
"""

import logging
from datetime import datetime, timezone

from fastapi import WebSocket

from routetrack.Core.timeutils import to_iso_z
from .wsBase import WebSocketManager


def _msg_type_for(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warning"
    return "log"


class LogWebSocketManager(WebSocketManager):
    """
    WebSocket manager specialized for log streaming.

    Clients only listen; incoming messages are answered with a ``pong`` to
    ``ping`` and ignored otherwise.
    """

    async def handle_message(self, ws: WebSocket, message: str):
        if message.strip().lower() == "ping":
            await ws.send_text('{"msg_type": "pong"}')


log_ws_manager = LogWebSocketManager()
"""Global singleton used by the /logs endpoint and WebSocketLogHandler."""


class WebSocketLogHandler(logging.Handler):
    """
    logging.Handler that mirrors records to the /logs WebSocket clients.

    Records are dropped cheaply when nobody is connected.
    """

    def __init__(self, manager: LogWebSocketManager = log_ws_manager, level: int = logging.INFO):
        super().__init__(level)
        self.manager = manager

    def emit(self, record: logging.LogRecord) -> None:
        if not self.manager.has_clients:
            return
        try:
            payload = {
                "msg_type": _msg_type_for(record.levelno),
                "message": self.format(record),
                "timestamp": to_iso_z(datetime.fromtimestamp(record.created, tz=timezone.utc)),
                "logger": record.name,
            }
            self.manager.send_from_thread(payload)
        except Exception:
            self.handleError(record)
