import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from laptop_api.api.http import health_router, laptops_router
from laptop_api.api.graphql import graphql_router
from laptop_api.core.config import settings
from laptop_api.core.db import init_db
from laptop_api.core.log import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.db_populate:
        logger.info("Creating database tables")
        await init_db()
    yield


app = FastAPI(
    title="Laptop Catalog",
    description="Каталог ноутбуков: REST и GraphQL",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag", "Location"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации тела запроса дают 400"""
    logger.debug("validation error: %s", exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())}
    )


# Подключаем роутеры
app.include_router(health_router)
app.include_router(laptops_router)
app.include_router(graphql_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Laptop Catalog API",
        "version": "1.0.0",
        "docs": "/docs",
        "graphql": "/graphql",
        "health": "/health"
    }
