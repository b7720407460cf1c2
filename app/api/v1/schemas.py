# app/api/v1/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models.portfolio import BasicInfo, EmbeddingState, Portfolio, PortfolioItem, Attachment


class BasicInfoRequest(BasicInfo):

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("gpa")
    @classmethod
    def gpa_not_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("gpa must not be negative")
        return v


class ReorderRequest(BaseModel):
    item_ids: List[str]


class AttachmentResp(BaseModel):
    object_key: str
    original_filename: Optional[str] = None
    content_type: Optional[str] = None
    file_size: int = 0
    extraction_status: str
    url: Optional[str] = None


class PortfolioItemResp(BaseModel):
    id: str
    order: int
    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    attachments: List[AttachmentResp] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PortfolioResp(BaseModel):
    portfolio_id: str
    job_seeker_id: str
    basic_info: Optional[BasicInfo] = None
    items: List[PortfolioItemResp] = Field(default_factory=list)
    item_count: int = 0
    embedding_state: EmbeddingState
    created_at: datetime
    updated_at: datetime


class ExistPortfolioResp(BaseModel):
    job_seeker_id: str
    exists: bool


def _attachment_resp(a: Attachment, storage=None) -> AttachmentResp:
    return AttachmentResp(
        object_key=a.object_key,
        original_filename=a.original_filename,
        content_type=a.content_type,
        file_size=a.file_size,
        extraction_status=str(a.extraction_status),
        url=storage.public_url(a.object_key) if storage is not None else None,
    )


def _item_resp(item: PortfolioItem, storage=None) -> PortfolioItemResp:
    return PortfolioItemResp(
        id=item.id,
        order=item.order,
        type=item.type,
        title=item.title,
        content=item.content,
        attachments=[_attachment_resp(a, storage) for a in item.attachments],
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def portfolio_resp(p: Portfolio, storage=None) -> PortfolioResp:
    return PortfolioResp(
        portfolio_id=p.id,
        job_seeker_id=p.job_seeker_id,
        basic_info=p.basic_info,
        items=[_item_resp(i, storage) for i in p.items],
        item_count=len(p.items),
        embedding_state=p.embedding_state,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )
