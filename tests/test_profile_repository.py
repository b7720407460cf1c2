# tests/test_profile_repository.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.db import models  # noqa: F401  registers the tables
from app.db.models import JobSeekerProfile
from app.repositories.profiles import JobSeekerProfileRepository


@pytest.fixture
def in_memory_db():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal


def test_ensure_profile_creates_once(in_memory_db):
    repo = JobSeekerProfileRepository(in_memory_db())

    first = repo.ensure_profile("js-1")
    second = repo.ensure_profile("js-1")

    assert first.id is not None
    assert second.id == first.id
    assert first.portfolio_id is None


def test_portfolio_pointer_set_and_cleared(in_memory_db):
    repo = JobSeekerProfileRepository(in_memory_db())
    profile = repo.ensure_profile("js-1")

    profile.portfolio_id = "65f0c0ffee0000000000abcd"
    repo.save(profile)
    assert JobSeekerProfileRepository(in_memory_db()).find_by_job_seeker_id("js-1").portfolio_id == profile.portfolio_id

    profile.portfolio_id = None
    repo.save(profile)
    assert JobSeekerProfileRepository(in_memory_db()).find_by_job_seeker_id("js-1").portfolio_id is None


def test_find_missing_profile(in_memory_db):
    assert JobSeekerProfileRepository(in_memory_db()).find_by_job_seeker_id("nobody") is None


def test_duplicate_job_seeker_rolls_back(in_memory_db):
    db = in_memory_db()
    repo = JobSeekerProfileRepository(db)
    repo.ensure_profile("js-1")

    with pytest.raises(IntegrityError):
        repo.save(JobSeekerProfile(job_seeker_id="js-1"))

    # session is usable again after the rollback
    assert repo.find_by_job_seeker_id("js-1") is not None
