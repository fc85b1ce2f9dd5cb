"""FastAPI application entry point."""

import os
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import migrations


def cors_origins_from_env() -> List[str]:
    """Origins listed in SHOP_MIGRATE_CORS_ORIGINS (comma separated)."""
    raw = os.environ.get("SHOP_MIGRATE_CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(cors_origins: Optional[List[str]] = None) -> FastAPI:
    app = FastAPI(
        title="Shop Migrate API",
        description="API for migrating store data between Shopify stores",
        version="0.1.0",
    )

    origins = cors_origins if cors_origins is not None else cors_origins_from_env()
    # No origins means no cross-origin access
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(migrations.router, prefix="/api/migrations", tags=["migrations"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
