# app/api/health.py
from datetime import datetime
from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()

SERVICE_NAME = "Experfolio API"
VERSION = "1.0.0"

@router.get("/health")
async def health():
    return {
        "status": "UP",
        "timestamp": datetime.utcnow().isoformat(),
        "service": SERVICE_NAME,
        "version": VERSION,
        "env": settings.APP_ENV,
    }
