# roster_dashboard/main.py
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from roster_dashboard.api.endpoints import router as api_router
from roster_dashboard.core.config import settings
from roster_dashboard.core.dashboard import Dashboard
from roster_dashboard.data.client import RosterServiceClient
import logging

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def create_app(client: Optional[RosterServiceClient] = None, load_on_startup: bool = True) -> FastAPI:
    """Build the dashboard service around one console session"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} against {settings.api_base_url}")
        dashboard = Dashboard(client)
        app.state.dashboard = dashboard
        if load_on_startup:
            await dashboard.load_initial()
        yield
        dashboard.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="Crew roster dashboard backed by the roster scheduling service",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "message": settings.app_name,
            "version": "1.0.0",
            "docs": "/docs",
            "health_check": "/api/v1/health",
        }

    @app.get("/info")
    async def info():
        return {
            "app_name": settings.app_name,
            "roster_service": settings.api_base_url,
            "flights_page_size": settings.flights_page_size,
            "duty_chart_limit": settings.duty_chart_limit,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
