# app/repositories/portfolios.py
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.models.portfolio import Portfolio

logger = logging.getLogger(__name__)


def _oid(portfolio_id: str) -> ObjectId:
    try:
        return ObjectId(portfolio_id)
    except (InvalidId, TypeError):
        raise ValueError(f"not a portfolio document id: {portfolio_id!r}")


class PortfolioRepository:
    """
    Portfolio documents in MongoDB, one per job seeker.

    ``collection`` is a motor collection with a unique index on
    ``job_seeker_id`` (see ``app.db.mongo.init_db``).
    """

    def __init__(self, collection):
        self.collection = collection

    async def find_by_job_seeker_id(self, job_seeker_id: str) -> Optional[Portfolio]:
        doc = await self.collection.find_one({"job_seeker_id": job_seeker_id})
        return Portfolio.from_document(doc) if doc else None

    async def exists_by_job_seeker_id(self, job_seeker_id: str) -> bool:
        count = await self.collection.count_documents({"job_seeker_id": job_seeker_id}, limit=1)
        return count > 0

    async def insert(self, portfolio: Portfolio) -> Portfolio:
        doc = portfolio.to_document()
        try:
            res = await self.collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise ConflictError("portfolio already exists") from exc
        return portfolio.model_copy(update={"id": str(res.inserted_id)})

    async def save(self, portfolio: Portfolio) -> Portfolio:
        if not portfolio.id:
            return await self.insert(portfolio)
        doc = portfolio.to_document()
        await self.collection.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        return portfolio

    async def delete(self, portfolio: Portfolio) -> bool:
        res = await self.collection.delete_one({"_id": _oid(portfolio.id)})
        return res.deleted_count > 0

    async def find_by_job_seeker_ids(self, job_seeker_ids: Iterable[str]) -> List[Portfolio]:
        ids = list(job_seeker_ids)
        if not ids:
            return []
        cur = self.collection.find({"job_seeker_id": {"$in": ids}})
        out = []
        async for doc in cur:
            out.append(Portfolio.from_document(doc))
        return out

    async def mark_embedding_processed(self, portfolio_id: str, processed_at: datetime) -> bool:
        """
        Clear the re-embedding flag. Called by the embedding worker once the
        search index holds the current content.
        """
        res = await self.collection.update_one(
            {"_id": _oid(portfolio_id)},
            {"$set": {
                "embedding_state.needs_embedding": False,
                "embedding_state.last_processed_at": processed_at,
            }},
        )
        return res.modified_count > 0


def portfolios_by_job_seeker(portfolios: Iterable[Portfolio]) -> Dict[str, Portfolio]:
    return {p.job_seeker_id: p for p in portfolios}
