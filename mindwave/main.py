from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mindwave.config import settings
from mindwave.database import db
from mindwave.routes import auth, games, time_attack, results, materials, notifications
from mindwave.utils.errors import MindwaveError
from mindwave.utils.logging_config import configure_logging
import logging

configure_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    materials.seed_subjects(db)
    yield

app = FastAPI(title=settings.app_name, version="1.0.0",
              description="API for the Mindwave campus learning games", lifespan=lifespan)

# Campus front-ends: configured origins plus localhost and LAN addresses
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.client_origins,
    allow_origin_regex=r"^http://(localhost|127\.0\.0\.1|192\.168\.\d+\.\d+)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(MindwaveError)
async def mindwave_error_handler(request: Request, exc: MindwaveError):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": exc.message})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"ok": False, "message": message})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"ok": False, "message": "Server error"})

# Include routers with prefixes and tags
app.include_router(auth.router, prefix="/api", tags=["Authentication"])
app.include_router(games.router, prefix="/api/games", tags=["Games"])
app.include_router(time_attack.router, prefix="/api", tags=["Time Attack"])
app.include_router(results.router, prefix="/api/results", tags=["Results"])
app.include_router(materials.router, prefix="/api", tags=["Materials"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])

# Root endpoint
@app.get("/")
async def root():
    return {"ok": True, "message": "Mindwave API running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mindwave.main:app", host="0.0.0.0", port=8081, reload=settings.debug)
