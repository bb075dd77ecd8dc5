import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Core imports
from packages.isim_core.config import ISIMConfig
from packages.isim_core.logging import get_logger, setup_logging

# API Routers
from ISIM.api.dashboard import router as dashboard_router
from ISIM.api.dependencies import get_interview_flow
from ISIM.api.health import router as health_router
from ISIM.api.interview import router as interview_router

# Configuration Load
config = ISIMConfig.load()
logger = get_logger("ISIM.main")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(config.LOG_DIR)
    logger.info(f"Starting {config.PROJECT_NAME} v{config.VERSION}...")
    flow = app.dependency_overrides.get(get_interview_flow, get_interview_flow)()
    await flow.resume_pending()

    stop_event = asyncio.Event()
    watcher = asyncio.create_task(flow.watch_timers(stop_event, config.TIMER_TICK_MS))

    yield

    # Shutdown
    stop_event.set()
    await watcher
    logger.info("Server shutting down...")

def create_app() -> FastAPI:
    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health_router, prefix="", tags=["Status"])
    app.include_router(interview_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix="/api/v1")

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ISIM.main:app", host="0.0.0.0", port=8000, reload=True)
