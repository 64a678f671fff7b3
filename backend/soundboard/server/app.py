from __future__ import annotations

import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute

from shared.errors import InvalidInputError, RoomNotFoundError
from shared.logging import setup_logging
from soundboard.messaging.router import BroadcastRouter
from soundboard.rooms.lifecycle import RoomLifecycleManager
from soundboard.rooms.registry import RoomRegistry
from soundboard.server.settings import SoundboardServerSettings
from soundboard.server.websocket import websocket_endpoint

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request
    from starlette.websockets import WebSocket


async def health(request: Request) -> JSONResponse:
    registry: RoomRegistry = request.app.state.registry
    return JSONResponse({"status": "ok", "rooms": registry.room_count})


async def create_room(request: Request) -> JSONResponse:
    lifecycle: RoomLifecycleManager = request.app.state.lifecycle
    try:
        room = lifecycle.create_room(request.query_params.get("name", ""))
    except InvalidInputError as e:
        return JSONResponse({"error": str(e)}, status_code=HTTPStatus.BAD_REQUEST)
    return JSONResponse(room.to_info().model_dump(), status_code=HTTPStatus.CREATED)


async def get_room(request: Request) -> JSONResponse:
    lifecycle: RoomLifecycleManager = request.app.state.lifecycle
    try:
        room = lifecycle.get_room(request.path_params["room_id"])
    except RoomNotFoundError:
        return JSONResponse({"error": "room_not_found"}, status_code=HTTPStatus.NOT_FOUND)
    return JSONResponse(room.to_info().model_dump())


def create_app(
    settings: SoundboardServerSettings | None = None,
    registry: RoomRegistry | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = SoundboardServerSettings()

    if registry is None:
        registry = RoomRegistry(idle_grace_seconds=settings.room_idle_grace_seconds)
    lifecycle = RoomLifecycleManager(registry, reaper_interval_seconds=settings.reaper_interval_seconds)
    router = BroadcastRouter(registry)

    async def ws_endpoint(websocket: WebSocket) -> None:
        await websocket_endpoint(websocket, registry, router, deliver_timeout_seconds=settings.deliver_timeout_seconds)

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/room", create_room, methods=["POST"]),
        Route("/room/{room_id}", get_room, methods=["GET"]),
        WebSocketRoute("/ws/{room_id}", ws_endpoint),
    ]

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        lifecycle.start_reaper()
        yield
        await lifecycle.stop_reaper()

    app = Starlette(routes=routes, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.state.registry = registry
    app.state.lifecycle = lifecycle

    logger.info(
        "soundboard server ready",
        idle_grace_seconds=registry.idle_grace_seconds,
        reaper_interval_seconds=settings.reaper_interval_seconds,
    )
    return app


def get_app() -> Starlette:  # pragma: no cover
    """ASGI application factory for production use (uvicorn --factory soundboard.server.app:get_app)."""
    settings = SoundboardServerSettings()
    setup_logging(log_dir=settings.log_dir, service="soundboard")
    return create_app(settings=settings)
