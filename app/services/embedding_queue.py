# app/services/embedding_queue.py
import json
import logging
from typing import Optional

import redis.asyncio as aioredis

from app.core.config import settings

logger = logging.getLogger(__name__)

STREAM_KEY = "portfolio:embedding"
# keep the stream bounded; the dirty flag on the document is authoritative
STREAM_MAXLEN = 10_000


def _get_redis_client():
    return aioredis.from_url(settings.REDIS_URL, decode_responses=True)


class EmbeddingNotifier:
    """
    Wakes the embedding worker after a portfolio's content changed.

    Publishing is best-effort: the worker also polls portfolios whose
    ``embedding_state.needs_embedding`` is set, so a lost message only delays
    re-indexing.
    """

    def __init__(self, client=None, stream: str = STREAM_KEY):
        self._client = client
        self.stream = stream

    @property
    def client(self):
        if self._client is None:
            self._client = _get_redis_client()
        return self._client

    async def notify(self, portfolio_id: Optional[str], job_seeker_id: str, reason: str) -> Optional[str]:
        entry = {
            "payload": json.dumps({
                "portfolio_id": portfolio_id,
                "job_seeker_id": job_seeker_id,
                "reason": reason,
            }, ensure_ascii=False),
        }
        try:
            sid = await self.client.xadd(self.stream, entry, maxlen=STREAM_MAXLEN, approximate=True)
        except Exception:
            logger.warning("Could not publish embedding request for %s (%s)", job_seeker_id, reason, exc_info=True)
            return None
        return str(sid)
