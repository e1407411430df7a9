# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from arena.config import settings
from arena.api.routes import admin, contests, cron, vote
from arena.core.exceptions import ArenaError, LifecycleAnomaly
from arena.core.logging_middleware import log_requests
from arena.core.logger import logger

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug
)

# ===== Request logging (registered first) =====
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    return await log_requests(request, call_next)
# ==============================================

# Request size limit (JSON bodies only, no uploads)
MAX_REQUEST_SIZE = 1 * 1024 * 1024

@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    """Reject oversized bodies"""
    if request.method in ["POST", "PUT", "PATCH"]:
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request too large. Max: {MAX_REQUEST_SIZE // 1024}KB"}
            )
    return await call_next(request)

# Typed service outcomes -> HTTP
@app.exception_handler(ArenaError)
async def arena_error_handler(request: Request, exc: ArenaError):
    if isinstance(exc, LifecycleAnomaly):
        logger.critical(f"{request.method} {request.url.path} - {exc.code}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.code}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers()
    )

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(vote.router)
app.include_router(contests.router)
app.include_router(cron.router)
app.include_router(admin.router)

# ===== Lifecycle logs =====
@app.on_event("startup")
async def startup_event():
    logger.info("Art Arena API started")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Art Arena API stopped")
# ==========================

@app.get("/health")
def health_check():
    """Health check"""
    return {
        "status": "healthy",
        "service": settings.app_name
    }
