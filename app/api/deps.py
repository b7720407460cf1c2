# app/api/deps.py
"""FastAPI dependencies wiring repositories and gateways into services."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.mongo import get_portfolio_collection
from app.db.session import get_session
from app.repositories.portfolios import PortfolioRepository
from app.repositories.profiles import JobSeekerProfileRepository
from app.services.embedding_queue import EmbeddingNotifier
from app.services.portfolio import PortfolioService
from app.services.search import SearchService
from app.services.storage import AttachmentStore


def get_portfolio_repository() -> PortfolioRepository:
    return PortfolioRepository(get_portfolio_collection())


@lru_cache()
def get_attachment_store() -> AttachmentStore:
    return AttachmentStore()


@lru_cache()
def get_embedding_notifier() -> Optional[EmbeddingNotifier]:
    if not settings.EMBEDDING_NOTIFY_ENABLED:
        return None
    return EmbeddingNotifier()


def get_portfolio_service(
    portfolios: PortfolioRepository = Depends(get_portfolio_repository),
    session: Session = Depends(get_session),
    storage: AttachmentStore = Depends(get_attachment_store),
    notifier: Optional[EmbeddingNotifier] = Depends(get_embedding_notifier),
) -> PortfolioService:
    return PortfolioService(portfolios, JobSeekerProfileRepository(session), storage, notifier)


def get_search_service(portfolios: PortfolioRepository = Depends(get_portfolio_repository)) -> SearchService:
    return SearchService(portfolios)
