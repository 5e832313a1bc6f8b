import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from checkin.config import (
    CORS_ALLOW_CREDENTIALS,
    CORS_ALLOW_HEADERS,
    CORS_ALLOW_METHODS,
    CORS_ALLOW_ORIGINS,
    LOG_LEVEL,
)
from checkin.routers.attendance import router as attendance_router
from checkin.routers.core import router as core_router
from checkin.routers.qr import router as qr_router
from checkin.routers.window import router as window_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Checkin API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=CORS_ALLOW_CREDENTIALS,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)

app.include_router(core_router)
app.include_router(window_router)
app.include_router(attendance_router)
app.include_router(qr_router)
