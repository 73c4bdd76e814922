"""
Ferry Watch - Gozo Channel Ferry Tracker
Live ferry positions, Nikolaos alerts and likely-ferry predictions
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from ferrywatch.database import init_db
from ferrywatch.dependencies import notifier, schedule_service, store
from ferrywatch.models.vessel import Terminal
from ferrywatch.routes import feedback_routes, vessel_routes
from ferrywatch.services import forecast_service
from ferrywatch.services.ais_feed import AISFeedService
from ferrywatch.services.websocket_service import WebSocketManager

# Setup logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def build_summary(terminal: Terminal, drive_time):
    # get_schedule may hit the network when the day rolls over
    schedule = await asyncio.to_thread(schedule_service.get_schedule)
    return forecast_service.terminal_summary(store, terminal, drive_time, schedule)


# WebSocket manager for handling connections
ws_manager = WebSocketManager(summary_builder=build_summary)

ais_feed = AISFeedService(settings.AISSTREAM_API_KEY, store, message_callback=ws_manager.broadcast_vessel)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events
    """
    # Startup
    logger.info("🚀 Ferry Watch Server Starting...")
    logger.info(f"Environment: {settings.ENV}")

    init_db()

    await asyncio.to_thread(schedule_service.refresh)

    if settings.AISSTREAM_API_KEY:
        asyncio.create_task(ais_feed.start())
        logger.info("🚀 AIS feed started")
    else:
        logger.warning("⚠️ AISSTREAM_API_KEY not set, live tracking will not work")

    yield

    # Shutdown
    logger.info("⛔ Ferry Watch Server Shutting Down...")

    if ais_feed.is_running:
        await ais_feed.stop()

    await ws_manager.disconnect_all()


# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Include routers
app.include_router(vessel_routes.router, prefix="/api", tags=["vessels"])
app.include_router(feedback_routes.router, prefix="/api", tags=["feedback"])


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled server error on {request.url.path}: {exc}")
    notifier.send_alert(f"Unhandled server error: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.ENV,
        "service": "Ferry Watch",
        "feed_running": ais_feed.is_running,
        "vessels_tracked": len(store.vessels()),
        "last_vessel_update": store.last_update.isoformat() if store.last_update else None,
        "ws_connections": ws_manager.get_connection_count(),
        "schedule_date": schedule_service.cached_schedule.date if schedule_service.cached_schedule else None,
    }


# ==================== WEBSOCKET ENDPOINTS ====================

@app.websocket("/ws/vessels")
async def websocket_vessel_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for live ferry updates

    Send {"type": "subscribe", "terminal": "mgarr", "drive_time": 12} to get
    that terminal's forecast with every update.
    """
    await ws_manager.connect(websocket, client_id=f"{websocket.client[0]}:{websocket.client[1]}", initial=store.stream_message())

    try:
        while True:
            data = await websocket.receive_json()

            if data.get("type") == "subscribe":
                await ws_manager.subscribe_to_terminal(
                    websocket,
                    terminal=data.get("terminal", ""),
                    drive_time=data.get("drive_time"),
                )

            elif data.get("type") == "unsubscribe":
                await ws_manager.unsubscribe(websocket)

            elif data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        await ws_manager.disconnect(websocket)
        logger.info(f"Client disconnected: {websocket.client[0]}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        await ws_manager.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn

    # Run server with Uvicorn
    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS if settings.ENV == "production" else 1,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
