# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.exceptions import BaseORMException

from app.config import settings
from app.core.db import init_db, close_db
from app.core.errors import AppError, InternalError, ValidationError
from app.core.pubsub import channel
from app.core.storage import GCSStorage

from app.api.routers import auth, messages
from app.api.routers.ws_chat import router as ws_chat_router

logger = logging.getLogger("uvicorn.error")
logger.setLevel(settings.log_level.upper())

app = FastAPI(title=settings.APP_NAME)

# Shared, read-only after startup; handlers reach them through app.api.deps
app.state.settings = settings
app.state.storage = GCSStorage.from_settings(settings)
app.state.channel = channel

# CORS (bearer tokens, no cookies)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# -------- error rendering --------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    err = ValidationError(f"{field}: {first.get('msg', 'invalid value')}")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())

@app.exception_handler(BaseORMException)
async def orm_error_handler(request: Request, exc: BaseORMException):
    logger.exception("[db] %s %s failed", request.method, request.url.path, exc_info=exc)
    err = InternalError()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[app] unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

@app.on_event("startup")
async def on_startup():
    if not settings.jwt_secret:
        logger.warning("[config] JWT_SECRET is not set; protected routes will answer 500")
    try:
        await init_db(generate_schemas=settings.env == "dev")
    except Exception:
        # Nothing works without the database; abort startup
        logger.critical("[db] connection to %s failed", settings.database_url.split("@")[-1], exc_info=True)
        raise
    logger.info("[db] connected")

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api")
app.include_router(messages.router, prefix="/api")

# WebSocket
app.include_router(ws_chat_router)

@app.get("/healthz")
def healthz():
    return {"ok": True}

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
