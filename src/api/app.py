"""
FastAPI application: a single websocket endpoint carrying the game protocol, plus a health probe.

Serving the application (binding a port, static assets, the page itself) is left to whoever embeds it,
ex. `uvicorn "src.api.app:create_app" --factory`.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import uuid4

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from src.chess.cooldowns import Clock, now_ms
from src.core.config import Settings
from src.core.log_config import configure_logging
from src.services.registry import SessionRegistry
from src.services.sync_service import SyncService


def create_app(settings: Optional[Settings] = None, clock: Clock = now_ms) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    service = SyncService(SessionRegistry(), settings, clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await service.shutdown()

    app = FastAPI(title="Cooldown Chess", lifespan=lifespan)
    app.state.sync_service = service

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "sessions": len(service.registry)}

    @app.websocket("/ws")
    async def ws_endpoint(ws: WebSocket) -> None:
        await ws.accept()
        participant = uuid4().hex
        service.connect(participant, ws)
        try:
            while True:
                text = await ws.receive_text()
                await service.handle(participant, text)
        except WebSocketDisconnect:
            pass
        finally:
            await service.disconnect(participant)

    return app
