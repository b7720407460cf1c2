# app/repositories/profiles.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import JobSeekerProfile

logger = logging.getLogger(__name__)


class JobSeekerProfileRepository:
    """
    Job seeker profiles in the relational store.

    Blocking; the async portfolio service calls it from executor threads.
    """

    def __init__(self, session: Session):
        self.session = session

    def find_by_job_seeker_id(self, job_seeker_id: str) -> Optional[JobSeekerProfile]:
        stmt = select(JobSeekerProfile).where(JobSeekerProfile.job_seeker_id == job_seeker_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def save(self, profile: JobSeekerProfile) -> JobSeekerProfile:
        try:
            self.session.add(profile)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(profile)
        return profile

    def ensure_profile(self, job_seeker_id: str) -> JobSeekerProfile:
        """Return the job seeker's profile, creating an empty one on first use."""
        profile = self.find_by_job_seeker_id(job_seeker_id)
        if profile is not None:
            return profile
        logger.info("Creating job seeker profile for %s", job_seeker_id)
        return self.save(JobSeekerProfile(job_seeker_id=job_seeker_id))
