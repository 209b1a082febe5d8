from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from framework.config import settings
from framework.database.manager import DatabaseManager
from framework.middleware.logging_md import LoggingMiddleware
from framework.logging.logger import LogConfig, get_logger
from framework.exceptions.errors import BusinessException
from framework.exceptions.handler import global_exception_handler
from apps.auth.api.router import router as auth_router
from apps.catalog.api.categories import router as categories_router
from apps.catalog.api.products import router as products_router

# Initialize logging configuration
LogConfig.setup_logging()
logger = get_logger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    manager = DatabaseManager.get_instance()
    await manager.sql.connect()
    logger.info("Database connection successful")
    if settings.AUTO_CREATE_TABLES:
        await manager.sql.create_all()
        logger.info("Database tables ensured")
    yield
    await manager.sql.disconnect()
    logger.info(f"{settings.APP_NAME} shut down")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Register global exception handlers
app.add_exception_handler(BusinessException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(LoggingMiddleware)

# Mount routers (prefix from config)
app.include_router(auth_router, prefix=settings.API_AUTH_PREFIX, tags=["Auth"])
app.include_router(categories_router, prefix=settings.API_CATEGORIES_PREFIX, tags=["Categories"])
app.include_router(products_router, prefix=settings.API_PRODUCTS_PREFIX, tags=["Products"])

# Serve stored product images
Path(settings.IMAGE_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(settings.IMAGE_BASE_URL.rstrip("/"), StaticFiles(directory=settings.IMAGE_ROOT), name="images")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
