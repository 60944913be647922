"""
FastAPI Application

Main entry point for the plan guard web API.
"""

from typing import Dict

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from hyrox_guard.api.routes import conflicts, exercises, validation
from hyrox_guard.config import get_settings

settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title="HYROX Plan Guard API",
    description="Safety caps, station coverage and auto-fix for generated HYROX training weeks",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(validation.router, prefix="/api", tags=["Validation"])
app.include_router(conflicts.router, prefix="/api", tags=["Conflicts"])
app.include_router(exercises.router, prefix="/api", tags=["Exercises"])


@app.get("/")
async def root() -> Dict[str, str]:
    """Root endpoint - API information."""
    return {
        "name": "HYROX Plan Guard API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "hyrox-plan-guard-api"}


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "message": str(exc.detail)},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """Malformed plans or constraints."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "Invalid request",
            "message": f"{len(exc.errors())} field error(s)",
            "details": jsonable_errors(exc),
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled API error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": str(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hyrox_guard.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
