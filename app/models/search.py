# app/models/search.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List

# The AI server speaks camelCase JSON; aliases keep python names snake_case.


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)


class CandidateSummary(BaseModel):
    """Read-only projection of a candidate's portfolio basic info."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    school_name: Optional[str] = Field(default=None, alias="schoolName")
    gpa: Optional[float] = None
    major: Optional[str] = None
    awards_count: int = Field(default=0, alias="awardsCount")


class Candidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_seeker_id: str = Field(alias="userId")
    match_score: Optional[float] = Field(default=None, alias="matchScore")
    match_reason: Optional[str] = Field(default=None, alias="matchReason")
    keywords: List[str] = Field(default_factory=list)
    user_info: Optional[CandidateSummary] = Field(default=None, alias="userInfo")


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Optional[str] = None
    candidates: List[Candidate] = Field(default_factory=list)
    search_time: Optional[str] = Field(default=None, alias="searchTime")
    total_results: Optional[int] = Field(default=None, alias="totalResults")
