# app/services/search.py
"""
Candidate search for recruiters.

The ranking itself happens on the external AI server; this module forwards
the query and enriches each returned candidate with a short summary of the
job seeker's portfolio basic info.
"""
import logging
import time
from typing import List, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import PortfolioError, SearchServiceError, StorageError
from app.models.portfolio import Portfolio
from app.models.search import Candidate, CandidateSummary, SearchResponse
from app.repositories.portfolios import portfolios_by_job_seeker

logger = logging.getLogger(__name__)


def mask_query(query: Optional[str]) -> Optional[str]:
    # queries may contain personal details; log only a prefix
    if query is None or len(query) <= 20:
        return query
    return query[:20] + "..."


def summarize(portfolio: Optional[Portfolio]) -> Optional[CandidateSummary]:
    if portfolio is None or portfolio.basic_info is None:
        return None
    info = portfolio.basic_info
    return CandidateSummary(
        name=info.name,
        school_name=info.school_name,
        gpa=info.gpa,
        major=info.major,
        awards_count=len(info.awards or []),
    )


class SearchService:

    def __init__(self, portfolios, http_client: Optional[httpx.AsyncClient] = None):
        self.portfolios = portfolios
        self._http_client = http_client

    async def enrich(self, candidates: List[Candidate]) -> List[Candidate]:
        """
        Attach a portfolio summary to every candidate, in place.

        One batch lookup for all distinct job seeker ids. Candidates without a
        portfolio (or without basic info) get ``user_info = None``.
        """
        if not candidates:
            return candidates

        job_seeker_ids = list(dict.fromkeys(c.job_seeker_id for c in candidates))
        try:
            found = await self.portfolios.find_by_job_seeker_ids(job_seeker_ids)
        except PortfolioError:
            raise
        except Exception as exc:
            logger.error("Portfolio batch lookup failed for %s job seeker ids: %r", len(job_seeker_ids), exc)
            raise StorageError("portfolio batch lookup failed") from exc
        logger.debug("Found %s portfolios for %s job seeker ids", len(found), len(job_seeker_ids))

        lookup = portfolios_by_job_seeker(found)
        for candidate in candidates:
            candidate.user_info = summarize(lookup.get(candidate.job_seeker_id))
            if candidate.user_info is None:
                logger.debug("No portfolio or basic info for job seeker %s", candidate.job_seeker_id)
        return candidates

    async def _post(self, client: httpx.AsyncClient, url: str, query: str) -> httpx.Response:
        resp = await client.post(url, json={"query": query}, timeout=settings.AI_TIMEOUT_SEC)
        resp.raise_for_status()
        return resp

    async def search(self, query: str) -> SearchResponse:
        logger.info("Executing search with query: %s", mask_query(query))
        url = settings.AI_SERVER_URL.rstrip("/") + settings.AI_SEARCH_ENDPOINT

        started = time.monotonic()
        try:
            if self._http_client is not None:
                resp = await self._post(self._http_client, url, query)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._post(client, url, query)
            result = SearchResponse.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            logger.error("AI server returned %s for search", exc.response.status_code)
            raise SearchServiceError(f"AI server returned an error: {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            logger.error("Failed to reach AI server at %s: %r", url, exc)
            raise SearchServiceError("AI server is unreachable") from exc
        except ValueError as exc:
            # bad JSON or a body that does not match SearchResponse
            logger.error("AI server sent an unreadable search response: %r", exc)
            raise SearchServiceError("AI server sent an invalid response") from exc

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("Search completed in %sms, total results: %s", elapsed_ms, result.total_results or 0)

        await self.enrich(result.candidates)
        return result
