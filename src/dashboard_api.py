"""
Grain Analytics Dashboard API

FastAPI application serving the analytics engine to the dashboard.
Run with: python -m src.dashboard_api
"""

import logging
import sys
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pythonjsonlogger import jsonlogger
from starlette.middleware.base import BaseHTTPMiddleware

from .analytics.api import router as analytics_router
from .db import get_db_backend

# --- Logging ---

# Configure JSON Logging
logger = logging.getLogger()
logHandler = logging.StreamHandler(sys.stdout)
formatter = jsonlogger.JsonFormatter(
    "%(asctime)s %(levelname)s %(name)s %(message)s",
    rename_fields={"asctime": "timestamp", "levelname": "severity"}
)
logHandler.setFormatter(formatter)
logger.addHandler(logHandler)
logger.setLevel(logging.INFO)

# --- Middleware ---

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000

        log_data = {
            "event": "access_log",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "processing_time_ms": round(process_time, 2),
            "user_agent": request.headers.get("user-agent"),
            "client_ip": request.client.host if request.client else None,
        }

        logger.info("request_processed", extra=log_data)
        return response

# --- FastAPI App ---

app = FastAPI(
    title="Grain Analytics API",
    description="Filtered basis and cash price trends for grain elevators",
    version="1.0.0",
)

# Middleware (Applied in reverse order: Last added is first executed)

# 2. Logging (Outermost - measures total time)
app.add_middleware(LoggingMiddleware)

# 1. CORS (Innermost - handles preflight)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(analytics_router)


@app.get("/health")
def health():
    """Liveness check."""
    return {"status": "ok", "db_backend": get_db_backend()}


# --- Main entry point ---

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
