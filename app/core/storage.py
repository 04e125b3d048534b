import secrets
import string
from datetime import datetime
from pathlib import Path
from typing import Protocol
from uuid import UUID

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.core import security
from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import StorageError

_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


class StorageBackend(Protocol):
    def upload(self, file_content: bytes, path: str, content_type: str | None = None) -> str:
        """Store the binary under ``path`` and return the storage pointer."""
        ...

    def public_url(self, path: str) -> str:
        """Return the unsigned URL of an object."""
        ...

    def signed_url(self, path: str, expires_in: int) -> str:
        """Return a URL granting read access for ``expires_in`` seconds."""
        ...

    def delete(self, path: str) -> None:
        """Delete an object by its path/key."""
        ...

    def exists(self, path: str) -> bool:
        """Check if an object exists."""
        ...


class LocalStorage:
    """Local filesystem storage for development.

    Signed URLs point at the media route, which checks a short-lived token
    before streaming the file.
    """

    def __init__(self, base_dir: str) -> None:
        self._base_dir = Path(base_dir)

    def resolve(self, path: str) -> Path:
        """Resolve path and validate it stays within base directory."""
        base_resolved = self._base_dir.resolve()
        full_path = (self._base_dir / path).resolve()
        if not full_path.is_relative_to(base_resolved) or full_path == base_resolved:
            raise ValueError(f"Path traversal attempt detected: {path}")
        return full_path

    def upload(self, file_content: bytes, path: str, content_type: str | None = None) -> str:
        full_path = self.resolve(path)
        if full_path.exists():
            raise StorageError(f"Object already exists: {path}")
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            with open(full_path, "wb") as f:
                f.write(file_content)
        except OSError as e:
            raise StorageError(f"Upload failed: {e}") from e
        return path

    def public_url(self, path: str) -> str:
        return f"{settings.BACKEND_URL}{settings.API_PREFIX}/media/{path}"

    def signed_url(self, path: str, expires_in: int) -> str:
        token = security.create_media_token(path, expires_in)
        return f"{self.public_url(path)}?token={token}"

    def delete(self, path: str) -> None:
        full_path = self.resolve(path)
        try:
            full_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Delete failed: {e}") from e

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()


class S3Storage:
    """S3-compatible bucket storage (Supabase Storage S3 endpoint, AWS S3, R2)."""

    def __init__(self) -> None:
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL or None,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            config=BotoConfig(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "standard"},
            ),
            region_name=settings.S3_REGION,
        )
        self._bucket = settings.STORAGE_BUCKET

    def upload(self, file_content: bytes, path: str, content_type: str | None = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=path,
                Body=file_content,
                CacheControl="max-age=3600",
                **extra,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Upload failed: {e}") from e
        return path

    def public_url(self, path: str) -> str:
        base = settings.S3_ENDPOINT_URL.rstrip("/") or f"https://s3.{settings.S3_REGION}.amazonaws.com"
        return f"{base}/{self._bucket}/{path}"

    def signed_url(self, path: str, expires_in: int) -> str:
        try:
            url: str = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not sign URL: {e}") from e
        return url

    def delete(self, path: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=path)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Delete failed: {e}") from e

    def exists(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=path)
            return True
        except ClientError:
            return False


def get_local_storage() -> LocalStorage:
    return LocalStorage(str(Path(settings.UPLOAD_DIR) / settings.STORAGE_BUCKET))


def get_storage() -> StorageBackend:
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage()
    return get_local_storage()


def build_video_path(course_id: UUID, original_filename: str, now: datetime | None = None) -> str:
    """Object key for a new video: ``{course_id}/{timestamp_ms}-{random}.{ext}``."""
    now = now or utcnow()
    extension = Path(original_filename).suffix.lstrip(".").lower() or "mp4"
    suffix = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(6))
    return f"{course_id}/{int(now.timestamp() * 1000)}-{suffix}.{extension}"
