# app/services/portfolio.py
"""
Portfolio lifecycle: create, read, update and delete a job seeker's
portfolio document, manage its items and their attachments, and keep the
``portfolio_id`` pointer on the relational profile in step with the document.

Collaborators:
  portfolios -- PortfolioRepository (async, MongoDB)
  profiles   -- JobSeekerProfileRepository (blocking, SQL); run in executor
  storage    -- AttachmentStore (async)
  notifier   -- optional EmbeddingNotifier

Creation is strict (a created document is linked or removed again, see
LinkSaga). Deletion is lenient (attachment cleanup and pointer unlinking are
best-effort and never fail the call).
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, List, Optional, Sequence

from app.core.exceptions import (
    ConflictError,
    LimitExceededError,
    NotFoundError,
    PortfolioError,
    StorageError,
    UnknownItemError,
    ValidationError,
)
from app.models.portfolio import (
    MAX_PORTFOLIO_ITEMS,
    Attachment,
    BasicInfo,
    ExtractionStatus,
    ItemDraft,
    Portfolio,
    PortfolioItem,
    UploadedFile,
)
from app.services.consistency import LinkSaga, best_effort

logger = logging.getLogger(__name__)


def _storage_error(message: str, cause: BaseException) -> StorageError:
    err = StorageError(message)
    err.__cause__ = cause
    return err


def assign_dense_order(items: List[PortfolioItem], ordered_item_ids: Sequence[str]) -> None:
    """
    Renumber ``items`` 1..N following ``ordered_item_ids``.

    The id list must name every item exactly once. Nothing is changed when
    it does not.
    """
    by_id = {item.id: item for item in items}
    seen = set()
    for item_id in ordered_item_ids:
        if item_id not in by_id:
            raise UnknownItemError(item_id)
        if item_id in seen:
            raise ValidationError(f"portfolio item listed more than once: {item_id}")
        seen.add(item_id)

    missing = [item.id for item in items if item.id not in seen]
    if missing:
        raise ValidationError(f"reorder must list every portfolio item, missing: {', '.join(missing)}")

    for position, item_id in enumerate(ordered_item_ids):
        by_id[item_id].order = position + 1


class PortfolioService:

    def __init__(self, portfolios, profiles, storage, notifier=None):
        self.portfolios = portfolios
        self.profiles = profiles
        self.storage = storage
        self.notifier = notifier

    # -- helpers ---------------------------------------------------------

    async def _store(self, description: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except PortfolioError:
            raise
        except Exception as exc:
            logger.error("%s failed: %r", description, exc)
            raise _storage_error(f"{description} failed", exc)

    async def _blocking(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def _require(self, job_seeker_id: str) -> Portfolio:
        portfolio = await self._store("portfolio lookup", self.portfolios.find_by_job_seeker_id(job_seeker_id))
        if portfolio is None:
            raise NotFoundError("portfolio not found")
        return portfolio

    @staticmethod
    def _require_item(portfolio: Portfolio, item_id: str) -> PortfolioItem:
        item = portfolio.find_item(item_id)
        if item is None:
            raise NotFoundError(f"portfolio item not found: {item_id}")
        return item

    async def _upload_files(self, job_seeker_id: str, files: Optional[Sequence[UploadedFile]]) -> List[Attachment]:
        """
        Upload every non-empty file. On the first failure, files uploaded so
        far in this call are deleted again and StorageError is raised.
        """
        attachments: List[Attachment] = []
        try:
            for f in files or []:
                if f.is_empty():
                    continue
                key = await self.storage.upload(f.data, f.filename, f.content_type, job_seeker_id)
                attachments.append(Attachment(
                    object_key=key,
                    original_filename=f.filename,
                    content_type=f.content_type,
                    file_size=f.size,
                    extraction_status=ExtractionStatus.PENDING,
                ))
        except Exception as exc:
            logger.error("File upload failed for job seeker %s after %s file(s): %r",
                         job_seeker_id, len(attachments), exc)
            await self._discard(attachments)
            raise _storage_error("file upload failed", exc)
        return attachments

    async def _discard(self, attachments: List[Attachment]) -> None:
        keys = [a.object_key for a in attachments]
        if keys:
            await best_effort(f"discard {len(keys)} uploaded file(s)", self.storage.delete_many, keys)

    async def _persist(self, portfolio: Portfolio, new_attachments: Optional[List[Attachment]] = None) -> Portfolio:
        try:
            return await self._store("portfolio save", self.portfolios.save(portfolio))
        except StorageError:
            # the document does not reference them; do not leave them behind
            await self._discard(new_attachments or [])
            raise

    async def _notify(self, portfolio: Portfolio, reason: str) -> None:
        if self.notifier is not None:
            await self.notifier.notify(portfolio.id, portfolio.job_seeker_id, reason)

    async def _unlink_profile(self, job_seeker_id: str) -> None:
        profile = await self._blocking(self.profiles.find_by_job_seeker_id, job_seeker_id)
        if profile is None:
            logger.warning("Job seeker profile not found for %s during portfolio deletion", job_seeker_id)
            return
        profile.portfolio_id = None
        await self._blocking(self.profiles.save, profile)
        logger.info("Portfolio id cleared from profile of job seeker %s", job_seeker_id)

    # -- lifecycle -------------------------------------------------------

    async def create_portfolio(self, job_seeker_id: str, basic_info: BasicInfo) -> Portfolio:
        """
        Create the job seeker's portfolio and link it from their profile.

        Either both stores end up consistent (document exists and the profile
        points at it) or no document is left behind.
        """
        logger.info("Creating portfolio for job seeker %s", job_seeker_id)

        if await self._store("portfolio lookup", self.portfolios.exists_by_job_seeker_id(job_seeker_id)):
            raise ConflictError("portfolio already exists")

        await self._store("profile provisioning", self._blocking(self.profiles.ensure_profile, job_seeker_id))

        # the unique index turns a lost check-then-insert race into ConflictError
        portfolio = await self._store("portfolio insert", self.portfolios.insert(Portfolio.new(job_seeker_id, basic_info)))
        logger.info("Portfolio created with id %s", portfolio.id)

        saga = LinkSaga(
            f"portfolio {portfolio.id} of job seeker {job_seeker_id}",
            undo=lambda: self.portfolios.delete(portfolio),
        )

        try:
            profile = await self._blocking(self.profiles.find_by_job_seeker_id, job_seeker_id)
        except Exception as exc:
            logger.error("Profile lookup failed for job seeker %s: %r", job_seeker_id, exc)
            await saga.fail(_storage_error("profile lookup failed", exc))

        if profile is None:
            logger.error("Job seeker profile not found for %s", job_seeker_id)
            await saga.fail(NotFoundError("profile not found for job seeker"))

        profile.portfolio_id = portfolio.id
        try:
            await self._blocking(self.profiles.save, profile)
        except Exception as exc:
            logger.error("Failed to store portfolio id on profile of job seeker %s: %r", job_seeker_id, exc)
            await saga.fail(_storage_error("failed to link portfolio to job seeker profile", exc))

        saga.linked()
        logger.info("Portfolio %s linked to profile of job seeker %s", portfolio.id, job_seeker_id)
        await self._notify(portfolio, "created")
        return portfolio

    async def get_my_portfolio(self, job_seeker_id: str) -> Portfolio:
        portfolio = await self._require(job_seeker_id)
        portfolio.items = portfolio.sorted_items()
        return portfolio

    async def exists_for_job_seeker(self, job_seeker_id: str) -> bool:
        return await self._store("portfolio lookup", self.portfolios.exists_by_job_seeker_id(job_seeker_id))

    async def update_basic_info(self, job_seeker_id: str, basic_info: BasicInfo) -> Portfolio:
        logger.info("Updating basic info for job seeker %s", job_seeker_id)
        portfolio = await self._require(job_seeker_id)

        portfolio.basic_info = basic_info.model_copy(deep=True)
        portfolio.mark_dirty()

        saved = await self._persist(portfolio)
        await self._notify(saved, "basic_info_updated")
        return saved

    async def delete_portfolio(self, job_seeker_id: str) -> None:
        logger.info("Deleting portfolio for job seeker %s", job_seeker_id)
        portfolio = await self._require(job_seeker_id)

        for item in portfolio.items:
            keys = [a.object_key for a in item.attachments]
            if keys:
                await best_effort(f"delete attachments of item {item.id}", self.storage.delete_many, keys)

        await self._store("portfolio delete", self.portfolios.delete(portfolio))

        # the document is gone; a stale pointer must not fail the deletion
        await best_effort(f"unlink portfolio of job seeker {job_seeker_id}", self._unlink_profile, job_seeker_id)
        logger.info("Portfolio deleted for job seeker %s", job_seeker_id)

    # -- items -----------------------------------------------------------

    async def add_item(self, job_seeker_id: str, draft: ItemDraft,
                       files: Optional[Sequence[UploadedFile]] = None) -> Portfolio:
        logger.info("Adding portfolio item for job seeker %s", job_seeker_id)
        portfolio = await self._require(job_seeker_id)

        if portfolio.is_full():
            raise LimitExceededError(f"a portfolio holds at most {MAX_PORTFOLIO_ITEMS} items")

        attachments = await self._upload_files(job_seeker_id, files)

        now = datetime.utcnow()
        item = PortfolioItem(
            order=portfolio.next_order(),
            type=draft.type,
            title=draft.title,
            content=draft.content,
            attachments=attachments,
            created_at=now,
            updated_at=now,
        )
        portfolio.items.append(item)
        portfolio.mark_dirty()

        saved = await self._persist(portfolio, attachments)
        logger.info("Portfolio item %s added with order %s", item.id, item.order)
        await self._notify(saved, "item_added")
        return saved

    async def update_item(self, job_seeker_id: str, item_id: str, draft: ItemDraft,
                          files: Optional[Sequence[UploadedFile]] = None) -> Portfolio:
        """
        Replace the item's type, title and content. New files are appended to
        the existing attachments; none are ever removed here.
        """
        logger.info("Updating portfolio item %s for job seeker %s", item_id, job_seeker_id)
        portfolio = await self._require(job_seeker_id)
        item = self._require_item(portfolio, item_id)

        attachments = await self._upload_files(job_seeker_id, files)

        item.type = draft.type
        item.title = draft.title
        item.content = draft.content
        item.attachments.extend(attachments)
        item.updated_at = datetime.utcnow()
        portfolio.mark_dirty()

        saved = await self._persist(portfolio, attachments)
        await self._notify(saved, "item_updated")
        return saved

    async def delete_item(self, job_seeker_id: str, item_id: str) -> None:
        logger.info("Deleting portfolio item %s for job seeker %s", item_id, job_seeker_id)
        portfolio = await self._require(job_seeker_id)
        item = self._require_item(portfolio, item_id)

        keys = [a.object_key for a in item.attachments]
        if keys:
            await best_effort(f"delete attachments of item {item_id}", self.storage.delete_many, keys)

        portfolio.items = [i for i in portfolio.items if i.id != item_id]
        portfolio.mark_dirty()

        saved = await self._persist(portfolio)
        await self._notify(saved, "item_deleted")

    async def reorder_items(self, job_seeker_id: str, ordered_item_ids: Sequence[str]) -> Portfolio:
        """
        Number the items 1..N in the given order.

        Presentation only: the re-embedding flag is left untouched.
        """
        logger.info("Reordering portfolio items for job seeker %s", job_seeker_id)
        portfolio = await self._require(job_seeker_id)

        assign_dense_order(portfolio.items, ordered_item_ids)
        portfolio.touch()

        saved = await self._persist(portfolio)
        saved.items = saved.sorted_items()
        return saved
