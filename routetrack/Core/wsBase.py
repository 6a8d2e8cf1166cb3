"""
routetrack/Core/wsBase.py
==============================
Shared WebSocket Client Registry
==============================

Tracking requests are served from FastAPI's worker threads while WebSocket
sends must run on the event loop. ``WebSocketManager`` keeps the connected
clients and bridges the two:

- register() / unregister(): called by the endpoint coroutine
- broadcast(): coroutine, fans one JSON message out to every client
- send_from_thread(): callable from any thread, schedules broadcast() on
  the loop handed over in the lifespan via set_main_loop()

Subclasses decide what to do with messages sent by clients
(handle_message()).
"""

import asyncio
import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from fastapi import WebSocket


class WebSocketManager(ABC):

    def __init__(self):
        self.clients: List[WebSocket] = []
        self.main_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def set_main_loop(self, loop: Optional[asyncio.AbstractEventLoop]):
        """Loop used by send_from_thread(); None detaches it on shutdown."""
        self.main_loop = loop

    def _snapshot(self) -> List[WebSocket]:
        with self._lock:
            return list(self.clients)

    async def register(self, ws: WebSocket):
        """
        Track the client, then complete the handshake.

        A failed handshake leaves no stale entry behind.
        """
        with self._lock:
            if ws not in self.clients:
                self.clients.append(ws)
        try:
            await ws.accept()
        except Exception:
            self.unregister(ws)
            raise

    def unregister(self, ws: WebSocket):
        with self._lock:
            if ws in self.clients:
                self.clients.remove(ws)

    @property
    def has_clients(self) -> bool:
        with self._lock:
            return bool(self.clients)

    async def broadcast(self, message: Dict[str, Any]):
        """Send ``message`` to every client; clients that fail to receive it are dropped."""
        payload = json.dumps(message)
        dead = []
        for ws in self._snapshot():
            try:
                await ws.send_text(payload)
            except Exception:
                dead.append(ws)
        for ws in dead:
            self.unregister(ws)

    def send_from_thread(self, message: Dict[str, Any]) -> bool:
        """
        Schedule a broadcast from a worker thread.

        Returns:
            bool: False when nothing was scheduled (no clients, or no open
            event loop attached)
        """
        loop = self.main_loop
        if loop is None or loop.is_closed() or not self.has_clients:
            return False
        asyncio.run_coroutine_threadsafe(self.broadcast(message), loop)
        return True

    @abstractmethod
    async def handle_message(self, ws: WebSocket, message: str):
        """React to a text frame sent by a client."""
