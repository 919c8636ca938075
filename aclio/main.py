# aclio/main.py
import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from aclio.api.v1.api import api_router
from aclio.core.config import settings

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_tags=[
        {"name": "planner", "description": "AI plan generation for goals and steps"},
        {"name": "chat", "description": "Streaming coach chat"},
        {"name": "Health", "description": "Service status"},
    ],
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Every error leaves the server as {"error": message}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


# ------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ------------------------------------------------------------
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "apiKeyConfigured": settings.api_key_configured,
    }


# ------------------------------------------------------------
# PLANNER AND CHAT ROUTES
# ------------------------------------------------------------
app.include_router(api_router, prefix="/api")


# ------------------------------------------------------------
# STARTUP EVENT
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info(f"🎯 {settings.APP_NAME} v{settings.VERSION} ({settings.ENVIRONMENT})")
    if settings.api_key_configured:
        logger.info("✅ LLM API key configured")
    else:
        logger.error("❌ GROQ_API_KEY is not set. Add GROQ_API_KEY=your_api_key_here to .env")
    logger.info(f"✅ Upstream model: {settings.LLM_MODEL}")


if __name__ == "__main__":
    uvicorn.run("aclio.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
