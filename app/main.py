# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.health import router as health_router
from app.api.v1.portfolios import router as portfolios_router
from app.api.v1.search import router as search_router
from app.core.config import settings
from app.core.exceptions import PortfolioError
from app.db.mongo import init_db, close_db
from app.db.session import init_models

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


app = FastAPI(title="Experfolio API")

app.include_router(health_router, prefix="/api")
app.include_router(portfolios_router, prefix="/api")
app.include_router(search_router, prefix="/api/v1")


@app.exception_handler(PortfolioError)
async def portfolio_error_handler(request: Request, exc: PortfolioError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.message})


@app.on_event("startup")
async def startup_event():
    init_models()
    await init_db()


@app.on_event("shutdown")
async def shutdown_event():
    close_db()
