# app/models/portfolio.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, Dict, List
from datetime import datetime
from enum import Enum
from bson import ObjectId
import uuid

# A portfolio never holds more than this many items
MAX_PORTFOLIO_ITEMS = 5


def _now() -> datetime:
    return datetime.utcnow()


class Award(BaseModel):
    award_name: Optional[str] = None
    achievement: Optional[str] = None
    award_year: Optional[str] = None


class Certification(BaseModel):
    certification_name: Optional[str] = None
    issue_year: Optional[str] = None


class LanguageTest(BaseModel):
    test_name: Optional[str] = None
    score: Optional[str] = None
    issue_year: Optional[str] = None


class BasicInfo(BaseModel):
    """Replaced as a whole on every update; there is no per-field patch."""
    name: str
    school_name: Optional[str] = None
    major: Optional[str] = None
    gpa: Optional[float] = None
    desired_position: Optional[str] = None
    reference_urls: List[str] = Field(default_factory=list)
    awards: List[Award] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    languages: List[LanguageTest] = Field(default_factory=list)


class ExtractionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Attachment(BaseModel):
    # enums are stored by value in Mongo
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    object_key: str
    original_filename: Optional[str] = None
    content_type: Optional[str] = None
    file_size: int = 0
    # moved forward by the content extraction worker
    extraction_status: ExtractionStatus = ExtractionStatus.PENDING


class PortfolioItem(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    order: int
    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class EmbeddingState(BaseModel):
    needs_embedding: bool = True
    last_processed_at: Optional[datetime] = None


class Portfolio(BaseModel):
    id: Optional[str] = None
    job_seeker_id: str
    basic_info: Optional[BasicInfo] = None
    items: List[PortfolioItem] = Field(default_factory=list)
    embedding_state: EmbeddingState = Field(default_factory=EmbeddingState)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @classmethod
    def new(cls, job_seeker_id: str, basic_info: BasicInfo) -> "Portfolio":
        now = _now()
        return cls(
            job_seeker_id=job_seeker_id,
            basic_info=basic_info,
            items=[],
            embedding_state=EmbeddingState(needs_embedding=True, last_processed_at=None),
            created_at=now,
            updated_at=now,
        )

    def find_item(self, item_id: str) -> Optional[PortfolioItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def is_full(self) -> bool:
        return len(self.items) >= MAX_PORTFOLIO_ITEMS

    def next_order(self) -> int:
        """
        Order for a newly added item: highest order so far plus one.

        Freed values are never reused, so after deletions the orders have gaps
        until the items are explicitly reordered.
        """
        return max((item.order for item in self.items), default=0) + 1

    def sorted_items(self) -> List[PortfolioItem]:
        return sorted(self.items, key=lambda item: item.order)

    def touch(self) -> None:
        self.updated_at = _now()

    def mark_dirty(self) -> None:
        # no diffing: any content write asks for a fresh embedding
        self.embedding_state.needs_embedding = True
        self.touch()

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(mode="python", exclude={"id"})
        if self.id:
            doc["_id"] = ObjectId(self.id)
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Portfolio":
        doc = dict(doc)
        if "_id" in doc:
            doc["id"] = str(doc.pop("_id"))
        return cls.model_validate(doc)


class ItemDraft(BaseModel):
    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


class UploadedFile(BaseModel):
    """A file received from the client, already read into memory."""
    filename: Optional[str] = None
    content_type: Optional[str] = None
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        return not self.data
