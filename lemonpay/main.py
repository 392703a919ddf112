import logging

from fastapi import FastAPI

from lemonpay.api.employees import router as employees_router
from lemonpay.api.leaves import router as leaves_router
from lemonpay.core.config import settings
from lemonpay.core.db import close_mongo, init_mongo
from lemonpay.core.exceptions import register_exception_handlers

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lemonpay Leave Service",
    version="0.1.0",
    description="Leave balance & approval service (REST + MongoDB)",
)

register_exception_handlers(app)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "service": "leave-service",
    }


@app.get("/")
async def root():
    return {
        "message": "Lemonpay Leave Service is running",
        "docs": "/docs",
    }


@app.on_event("startup")
async def on_startup():
    logger.info("Starting Lemonpay Leave Service")
    await init_mongo(app)


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("Shutting down Lemonpay Leave Service")
    await close_mongo(app)


app.include_router(employees_router)
app.include_router(leaves_router)
