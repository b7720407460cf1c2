# app/services/consistency.py
"""
Policies for writes that span the portfolio document store and the
relational profile store.

Two policies exist and they are deliberately different:

- ``LinkSaga``: strict. A document created in one store must end up
  referenced by the other, or be removed again. Used when creating.
- ``best_effort``: log and continue. Used by the delete paths, where the
  primary deletion has already happened and leftovers must not fail the call.
"""
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from app.core.exceptions import CompensationError

logger = logging.getLogger(__name__)


class LinkState(str, Enum):
    CREATED = "created"
    LINKED = "linked"
    LINK_FAILED = "link_failed"
    COMPENSATED = "compensated"
    COMPENSATION_FAILED = "compensation_failed"


class LinkSaga:
    """
    Tracks one ``created -> linked`` step pair.

        saga = LinkSaga("portfolio 42", undo=lambda: repo.delete(p))
        try:
            link()
        except Exception as exc:
            await saga.fail(exc)   # compensates, then re-raises
        saga.linked()

    Transitions:
        CREATED -> LINKED
        CREATED -> LINK_FAILED -> COMPENSATED | COMPENSATION_FAILED
    """

    def __init__(self, subject: str, undo: Callable[[], Awaitable[Any]]):
        self.subject = subject
        self._undo = undo
        self.state = LinkState.CREATED
        self.history: List[LinkState] = [LinkState.CREATED]
        self.compensation_error: Optional[BaseException] = None

    def _move(self, state: LinkState) -> None:
        self.state = state
        self.history.append(state)

    def linked(self) -> None:
        if self.state is not LinkState.CREATED:
            raise RuntimeError(f"cannot link {self.subject} in state {self.state.value}")
        self._move(LinkState.LINKED)

    async def compensate(self) -> bool:
        """Run the undo action once. Returns False if it failed."""
        if self.state is not LinkState.LINK_FAILED:
            raise RuntimeError(f"cannot compensate {self.subject} in state {self.state.value}")
        try:
            await self._undo()
        except Exception as exc:
            logger.exception("Compensation failed for %s; stores are inconsistent", self.subject)
            self.compensation_error = exc
            self._move(LinkState.COMPENSATION_FAILED)
            return False
        logger.info("Compensated %s", self.subject)
        self._move(LinkState.COMPENSATED)
        return True

    async def fail(self, error: BaseException) -> None:
        """
        Record that linking failed, compensate, and raise.

        ``error`` is raised when compensation succeeded. Otherwise a
        ``CompensationError`` carrying both failures is raised.
        """
        if self.state is not LinkState.CREATED:
            raise RuntimeError(f"cannot fail {self.subject} in state {self.state.value}")
        self._move(LinkState.LINK_FAILED)
        if await self.compensate():
            raise error
        raise CompensationError(
            f"could not undo {self.subject} after: {error}",
            original_error=error,
            compensation_error=self.compensation_error,
        ) from error


async def best_effort(description: str, fn: Callable[..., Awaitable[Any]], *args) -> bool:
    """
    Await ``fn(*args)``; log and swallow any failure.

    Returns True when the call succeeded.
    """
    try:
        await fn(*args)
        return True
    except Exception:
        logger.warning("Best-effort step failed: %s", description, exc_info=True)
        return False
