from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import datetime
import logging
import os
import sys

import psutil

from app.config import settings

# Init app
app = FastAPI(title="Training Portal Backend", version="1.0.0")

# Enable logging
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

# CORS Setup
origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600
)

# Route Registrations
from app.routes.onboarding import router as onboarding_router  # noqa: E402
from app.routes.payment import router as payment_router  # noqa: E402
from app.routes.webhooks import router as webhooks_router  # noqa: E402

routers = [
    onboarding_router,
    payment_router,
    webhooks_router,
]

for router in routers:
    app.include_router(router)
    logger.info(f"Included router: {router.prefix}")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "status": "ok",
        "message": "Welcome to the Training Portal Backend API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": [
            "/onboarding/status - Trainee onboarding stage",
            "/payments/* - Payment initialization and verification",
            "/webhooks/* - Payment provider callbacks",
            "/health - System health check"
        ]
    }


# Health check endpoint with detailed information
@app.get("/health", include_in_schema=False)
async def health_check():
    memory = psutil.virtual_memory()
    return {
        "status": "healthy",
        "timestamp": datetime.datetime.now().isoformat(),
        "server": {
            "python_version": sys.version,
            "platform": sys.platform,
            "pid": os.getpid(),
        },
        "memory": {
            "available": f"{memory.available / (1024**3):.2f} GB",
            "used": f"{memory.used / (1024**3):.2f} GB",
            "total": f"{memory.total / (1024**3):.2f} GB"
        }
    }


# Global exception handler
@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Training Portal Backend starting up...")
    logger.info(f"🌐 CORS enabled for origins: {origins}")
    logger.info("✅ Server is ready to handle requests")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Training Portal Backend shutting down...")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )
