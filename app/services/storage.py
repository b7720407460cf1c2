# app/services/storage.py
"""
Attachment storage on Cloudflare R2 (S3-compatible), with a local directory
fallback for development when no bucket is configured.

boto3 is blocking, so every S3 call runs in a small thread pool.
"""
import asyncio
import concurrent.futures
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import aiofiles
import boto3
from botocore.client import Config

from app.core.config import settings

logger = logging.getLogger(__name__)

# Local upload directory for dev fallback
LOCAL_UPLOAD_DIR = Path("uploads")

# S3 DeleteObjects accepts at most 1000 keys per request
_DELETE_BATCH = 1000

_thread_pool = concurrent.futures.ThreadPoolExecutor(max_workers=4)


def _get_s3_client():
    """
    Return a boto3 S3 client configured for Cloudflare R2 or MinIO.
    If no S3_ENDPOINT or credentials are configured, returns None.
    """
    endpoint = settings.S3_ENDPOINT
    access_key = settings.S3_ACCESS_KEY
    secret_key = settings.S3_SECRET_KEY

    if not endpoint or not access_key or not secret_key:
        return None

    # Use signature s3v4 for compatibility (Cloudflare R2 & MinIO)
    return boto3.client(
        "s3",
        endpoint_url=str(endpoint),
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=Config(signature_version="s3v4"),
        region_name=(settings.S3_REGION or None),
    )


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def generate_object_key(owner_id: str, filename: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Format: portfolios/{owner}/{yyyy-mm-dd}/{uuid8}_{yyyyMMddHHmmss}.{ext}
    """
    now = now or datetime.utcnow()
    key = f"portfolios/{owner_id}/{now:%Y-%m-%d}/{uuid.uuid4().hex[:8]}_{now:%Y%m%d%H%M%S}"
    ext = file_extension(filename)
    if ext:
        key = f"{key}.{ext}"
    return key


class AttachmentStore:
    """
    Gateway to the attachment bucket.

    ``upload`` raises on failure. ``delete_many`` raises on transport errors
    but never for keys that are already gone.
    """

    def __init__(self, client=None, bucket: Optional[str] = None, local_dir: Path = LOCAL_UPLOAD_DIR):
        self.client = client if client is not None else _get_s3_client()
        self.bucket = bucket or settings.S3_BUCKET
        self.local_dir = local_dir

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_thread_pool, fn, *args)

    async def upload(self, data: bytes, filename: Optional[str], content_type: Optional[str], owner_id: str) -> str:
        key = generate_object_key(owner_id, filename)
        content_type = content_type or "application/octet-stream"

        if self.client is None:
            path = self.local_dir / key
            await self._run(self._make_parent, path)
            async with aiofiles.open(path, "wb") as out:
                await out.write(data)
            logger.info("Attachment stored locally: %s", path)
            return key

        await self._run(self._put_object, key, data, content_type)
        logger.info("Attachment uploaded: %s (%s bytes)", key, len(data))
        return key

    @staticmethod
    def _make_parent(path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)

    def _remove_local(self, keys: List[str]) -> None:
        for key in keys:
            (self.local_dir / key).unlink(missing_ok=True)

    def _put_object(self, key: str, data: bytes, content_type: str) -> None:
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    async def delete_many(self, keys: List[str]) -> None:
        keys = [k for k in keys if k]
        if not keys:
            return

        if self.client is None:
            await self._run(self._remove_local, keys)
            return

        for start in range(0, len(keys), _DELETE_BATCH):
            batch = keys[start:start + _DELETE_BATCH]
            resp = await self._run(self._delete_objects, batch)
            errors = (resp or {}).get("Errors") or []
            # NoSuchKey means someone already removed it
            errors = [e for e in errors if e.get("Code") != "NoSuchKey"]
            if errors:
                raise RuntimeError(f"failed to delete {len(errors)} attachment(s): {errors[0].get('Key')}")
        logger.info("Attachments deleted: %s file(s)", len(keys))

    def _delete_objects(self, keys: List[str]):
        return self.client.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": k} for k in keys], "Quiet": True},
        )

    def public_url(self, key: str) -> Optional[str]:
        base = settings.S3_PUBLIC_URL
        if not base:
            return None
        return f"{base.rstrip('/')}/{key}"
