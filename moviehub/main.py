from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from moviehub.database import Base, engine
from moviehub.middleware.security import SecurityHeadersMiddleware
from moviehub.routes import admin, auth, comments, movies
from moviehub.utils.uploads import UPLOAD_URL_PREFIX, get_upload_dir
import os
import time
import logging

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
STARTED_AT = time.monotonic()


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    - Create tables (unless DB_AUTO_CREATE=false)
    - Make sure the upload directory exists

    Shutdown:
    - Dispose of pooled database connections
    """
    logger.info("=" * 60)
    logger.info("🚀 MovieHub API Starting...")
    logger.info(f"   Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"   CORS Origins: {len(allowed_origins)} configured")
    logger.info("=" * 60)

    if os.getenv("DB_AUTO_CREATE", "true").lower() == "true":
        Base.metadata.create_all(bind=engine)
    os.makedirs(get_upload_dir(), exist_ok=True)

    yield

    logger.info("=" * 60)
    logger.info("🛑 MovieHub API Shutting Down...")
    engine.dispose()
    logger.info("=" * 60)


app = FastAPI(
    title="MovieHub API",
    description="Movie rating and discussion platform",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ============================================
# Security Configuration
# ============================================

# CORS - Whitelist allowed origins
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
]
if production_url := os.getenv("FRONTEND_URL"):
    allowed_origins.append(production_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

app.add_middleware(
    SecurityHeadersMiddleware,
    enable_hsts=os.getenv("ENVIRONMENT") == "production",
)

# Trusted Hosts - Production only
if os.getenv("ENVIRONMENT") == "production":
    if trusted_hosts := [h for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


# ============================================
# Exception Handlers - every error uses the response envelope
# ============================================

def _field_errors(errors) -> list:
    """Flatten pydantic errors into [{field, message}]"""
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted.append({"field": ".".join(loc) or "body", "message": message})
    return formatted


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report every invalid field at once, as a 400"""
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": _field_errors(exc.errors())},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the detail server-side, return a generic message"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
    )


# ============================================
# Routes
# ============================================

@app.get("/", tags=["Health"])
async def root():
    """Basic banner"""
    return {
        "success": True,
        "message": "MovieHub API is running",
        "version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": {
            "auth": "/api/auth",
            "movies": "/api/movies",
            "comments": "/api/comments",
            "admin": "/api/admin",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for monitoring"""
    return {
        "status": "OK",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": os.getenv("ENVIRONMENT", "development"),
    }


@app.get("/api/health", tags=["Health"])
async def api_health_check():
    return {
        "success": True,
        "message": "MovieHub API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Core routes
app.include_router(auth.router)
app.include_router(movies.router)
app.include_router(comments.router)
app.include_router(admin.router)

# Uploaded posters
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=get_upload_dir(), check_dir=False), name="uploads")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 5000)),
        log_level="info"
    )
