# tests/conftest.py
import pytest
from bson import ObjectId

from app.core.exceptions import ConflictError
from app.db.models import JobSeekerProfile
from app.models.portfolio import BasicInfo, UploadedFile
from app.services.portfolio import PortfolioService


class InMemoryPortfolioRepository:
    """
    Stand-in for PortfolioRepository. Stores deep copies so the service can
    only observe what it explicitly saved.

    ``failures`` maps an operation name to the exception it should raise.
    Operations: find, exists, insert, save, delete, batch.
    """

    def __init__(self):
        self.docs = {}
        self.failures = {}
        self.batch_calls = []
        self.saves = 0

    def _maybe_fail(self, op):
        exc = self.failures.get(op)
        if exc is not None:
            raise exc

    def _by_job_seeker(self, job_seeker_id):
        for p in self.docs.values():
            if p.job_seeker_id == job_seeker_id:
                return p
        return None

    def stored(self, job_seeker_id):
        p = self._by_job_seeker(job_seeker_id)
        return p.model_copy(deep=True) if p else None

    async def find_by_job_seeker_id(self, job_seeker_id):
        self._maybe_fail("find")
        return self.stored(job_seeker_id)

    async def exists_by_job_seeker_id(self, job_seeker_id):
        self._maybe_fail("exists")
        return self._by_job_seeker(job_seeker_id) is not None

    async def insert(self, portfolio):
        self._maybe_fail("insert")
        if self._by_job_seeker(portfolio.job_seeker_id) is not None:
            raise ConflictError("portfolio already exists")
        saved = portfolio.model_copy(deep=True, update={"id": str(ObjectId())})
        self.docs[saved.id] = saved
        return saved.model_copy(deep=True)

    async def save(self, portfolio):
        self._maybe_fail("save")
        self.saves += 1
        self.docs[portfolio.id] = portfolio.model_copy(deep=True)
        return portfolio

    async def delete(self, portfolio):
        self._maybe_fail("delete")
        return self.docs.pop(portfolio.id, None) is not None

    async def find_by_job_seeker_ids(self, job_seeker_ids):
        self._maybe_fail("batch")
        ids = list(job_seeker_ids)
        self.batch_calls.append(ids)
        return [p.model_copy(deep=True) for p in self.docs.values() if p.job_seeker_id in ids]


class InMemoryProfileRepository:
    """Blocking stand-in for JobSeekerProfileRepository."""

    def __init__(self, auto_create=True):
        self.profiles = {}
        self.auto_create = auto_create
        self.failures = {}

    def _maybe_fail(self, op):
        exc = self.failures.get(op)
        if exc is not None:
            raise exc

    def find_by_job_seeker_id(self, job_seeker_id):
        self._maybe_fail("find")
        return self.profiles.get(job_seeker_id)

    def save(self, profile):
        self._maybe_fail("save")
        self.profiles[profile.job_seeker_id] = profile
        return profile

    def ensure_profile(self, job_seeker_id):
        self._maybe_fail("ensure")
        profile = self.profiles.get(job_seeker_id)
        if profile is None and self.auto_create:
            profile = JobSeekerProfile(job_seeker_id=job_seeker_id)
            self.profiles[job_seeker_id] = profile
        return profile


class DummyAttachmentStore:
    """
    Records uploads and deletions. ``fail_upload_at`` makes the n-th upload
    (1-based) raise; ``fail_delete`` makes every delete raise.
    """

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.uploads = 0
        self.fail_upload_at = None
        self.fail_delete = False

    async def upload(self, data, filename, content_type, owner_id):
        self.uploads += 1
        if self.fail_upload_at is not None and self.uploads == self.fail_upload_at:
            raise RuntimeError("bucket unavailable")
        key = f"portfolios/{owner_id}/{self.uploads}_{filename}"
        self.objects[key] = data
        return key

    async def delete_many(self, keys):
        if self.fail_delete:
            raise RuntimeError("delete failed")
        self.deleted.append(list(keys))
        for k in keys:
            self.objects.pop(k, None)

    def public_url(self, key):
        return None


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    async def notify(self, portfolio_id, job_seeker_id, reason):
        self.calls.append((job_seeker_id, reason))
        return "1-0"


@pytest.fixture
def portfolio_repo():
    return InMemoryPortfolioRepository()


@pytest.fixture
def profile_repo():
    return InMemoryProfileRepository()


@pytest.fixture
def attachment_store():
    return DummyAttachmentStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(portfolio_repo, profile_repo, attachment_store, notifier):
    return PortfolioService(portfolio_repo, profile_repo, attachment_store, notifier)


@pytest.fixture
def basic_info():
    return BasicInfo(name="Kim", school_name="Seoul U", major="CS", gpa=3.9)


def _make_file(name="report.pdf", data=b"%PDF-1.4 test", content_type="application/pdf"):
    return UploadedFile(filename=name, content_type=content_type, data=data)


@pytest.fixture
def make_file():
    return _make_file
