# tests/test_portfolio_consistency.py
import logging

import pytest

from app.core.exceptions import CompensationError, ConflictError, NotFoundError, StorageError
from app.services.consistency import LinkSaga, LinkState, best_effort


@pytest.mark.asyncio
async def test_create_without_profile_removes_document(service, portfolio_repo, profile_repo, notifier, basic_info):
    profile_repo.auto_create = False

    with pytest.raises(NotFoundError):
        await service.create_portfolio("js-1", basic_info)

    assert portfolio_repo.docs == {}
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_create_with_failing_profile_save_removes_document(service, portfolio_repo, profile_repo, basic_info):
    boom = RuntimeError("postgres down")
    profile_repo.failures["save"] = boom

    with pytest.raises(StorageError) as excinfo:
        await service.create_portfolio("js-1", basic_info)

    assert excinfo.value.__cause__ is boom
    assert not isinstance(excinfo.value, CompensationError)
    assert portfolio_repo.docs == {}
    assert await service.exists_for_job_seeker("js-1") is False


@pytest.mark.asyncio
async def test_create_with_failing_profile_lookup_removes_document(service, portfolio_repo, profile_repo, basic_info):
    profile_repo.failures["find"] = ConnectionError("pool exhausted")

    with pytest.raises(StorageError):
        await service.create_portfolio("js-1", basic_info)

    assert portfolio_repo.docs == {}


@pytest.mark.asyncio
async def test_failed_compensation_reports_both_errors(service, portfolio_repo, profile_repo, basic_info):
    link_error = RuntimeError("postgres down")
    undo_error = RuntimeError("mongo down")
    profile_repo.failures["save"] = link_error
    portfolio_repo.failures["delete"] = undo_error

    with pytest.raises(CompensationError) as excinfo:
        await service.create_portfolio("js-1", basic_info)

    err = excinfo.value
    assert isinstance(err.original_error, StorageError)
    assert err.original_error.__cause__ is link_error
    assert err.compensation_error is undo_error
    assert err.status_code == 500
    # the orphan is still there; that is what the error reports
    assert len(portfolio_repo.docs) == 1


@pytest.mark.asyncio
async def test_lost_insert_race_is_a_conflict(service, portfolio_repo, basic_info):
    portfolio_repo.failures["insert"] = ConflictError("portfolio already exists")

    with pytest.raises(ConflictError):
        await service.create_portfolio("js-1", basic_info)


@pytest.mark.asyncio
async def test_saga_happy_path():
    undo_calls = []

    async def undo():
        undo_calls.append(1)

    saga = LinkSaga("portfolio 1", undo)
    saga.linked()

    assert saga.state is LinkState.LINKED
    assert saga.history == [LinkState.CREATED, LinkState.LINKED]
    assert undo_calls == []
    with pytest.raises(RuntimeError):
        await saga.fail(ValueError("late"))


@pytest.mark.asyncio
async def test_saga_compensates_and_reraises():
    undo_calls = []

    async def undo():
        undo_calls.append(1)

    saga = LinkSaga("portfolio 1", undo)
    original = NotFoundError("profile not found for job seeker")

    with pytest.raises(NotFoundError) as excinfo:
        await saga.fail(original)

    assert excinfo.value is original
    assert undo_calls == [1]
    assert saga.history == [LinkState.CREATED, LinkState.LINK_FAILED, LinkState.COMPENSATED]
    with pytest.raises(RuntimeError):
        saga.linked()


@pytest.mark.asyncio
async def test_saga_compensation_failure():
    async def undo():
        raise OSError("disk gone")

    saga = LinkSaga("portfolio 1", undo)
    original = StorageError("link failed")

    with pytest.raises(CompensationError) as excinfo:
        await saga.fail(original)

    assert excinfo.value.original_error is original
    assert isinstance(excinfo.value.compensation_error, OSError)
    assert excinfo.value.__cause__ is original
    assert saga.state is LinkState.COMPENSATION_FAILED


@pytest.mark.asyncio
async def test_best_effort_logs_and_continues(caplog):
    async def broken(key):
        raise RuntimeError(f"cannot delete {key}")

    async def fine(key):
        return key

    with caplog.at_level(logging.WARNING, logger="app.services.consistency"):
        assert await best_effort("delete attachments", broken, "k1") is False
    assert "delete attachments" in caplog.text

    assert await best_effort("delete attachments", fine, "k1") is True
