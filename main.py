from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from property_lister.core.config import settings
from property_lister.core.database import InvalidIdentifier, RecordNotFound
from property_lister.core.logging import configure_logging
from property_lister.endpoints import auth, favorite, listing, property, recommendation, utility
from property_lister.middleware.exceptions import (
    global_exception_handler, http_exception_handler, invalid_identifier_handler, record_not_found_handler,
    validation_exception_handler,
)
from property_lister.middleware.logging import RequestLoggingMiddleware
from property_lister.utils.service_registry import ServiceRegistry


def create_app(services: Optional[ServiceRegistry] = None) -> FastAPI:
    services = services or ServiceRegistry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await services.startup()
        yield
        await services.shutdown()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(InvalidIdentifier, invalid_identifier_handler)
    app.add_exception_handler(RecordNotFound, record_not_found_handler)

    prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Auth"])
    app.include_router(property.router, prefix=f"{prefix}/properties", tags=["Properties"])
    app.include_router(listing.router, prefix=f"{prefix}/listings", tags=["Listings"])
    app.include_router(favorite.router, prefix=f"{prefix}/favorites", tags=["Favorites"])
    app.include_router(recommendation.router, prefix=f"{prefix}/recommendations", tags=["Recommendations"])
    app.include_router(utility.router, tags=["utility"])

    return app


configure_logging()
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
