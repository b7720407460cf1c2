# app/db/models.py
from sqlalchemy import Column, String, Text, DateTime
from .base import Base
import datetime
import uuid

def _uuid() -> str:
    return str(uuid.uuid4())

class JobSeekerProfile(Base):
    """
    Relational profile of a job seeker.

    Only ``portfolio_id`` is written by the portfolio service; the remaining
    columns belong to the profile service.
    """
    __tablename__ = "job_seeker_profiles"
    id = Column(String(36), primary_key=True, default=_uuid)
    job_seeker_id = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    desired_position = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    # id of the Mongo portfolio document, NULL when the job seeker has none
    portfolio_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
