from __future__ import annotations
import io
import mimetypes
import uuid
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Protocol
from minio import Minio
from minio.error import S3Error
import structlog
from viemind.config import Settings, settings

log = structlog.get_logger()


class UploadStore(Protocol):
    def put_bytes(self, key: str, data: bytes, content_type: str) -> None: ...
    def get_bytes(self, key: str) -> tuple[bytes, str]: ...
    def delete(self, key: str) -> None: ...


def _safe_key(key: str) -> str:
    p = PurePosixPath(key)
    if p.is_absolute() or ".." in p.parts or not p.parts:
        raise FileNotFoundError(f"Object not found: {key}")
    return str(p)


def submission_key(competition_id, participant_id, file_name: str) -> str:
    ext = PurePosixPath(file_name).suffix.lower()[:16]
    return f"submissions/{competition_id}/{participant_id}/{uuid.uuid4().hex}{ext}"


def public_url(key: str) -> str:
    return f"/api/uploads/{key}"


class LocalUploadStore:
    """Files on local disk under `root`. Placeholder for object storage."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        path = self.root / _safe_key(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def get_bytes(self, key: str) -> tuple[bytes, str]:
        path = self.root / _safe_key(key)
        if not path.is_file():
            raise FileNotFoundError(f"Object not found: {key}")
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return path.read_bytes(), content_type

    def delete(self, key: str) -> None:
        (self.root / _safe_key(key)).unlink(missing_ok=True)


def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "")
    return host, secure


class S3UploadStore:
    """S3-compatible bucket (MinIO in dev)."""

    def __init__(self, cfg: Settings):
        host, secure = _parse_endpoint(cfg.s3_endpoint)
        self.bucket = cfg.s3_bucket_uploads
        self._client = Minio(endpoint=host, access_key=cfg.s3_access_key, secret_key=cfg.s3_secret_key, secure=secure)
        try:
            if not self._client.bucket_exists(bucket_name=self.bucket):
                self._client.make_bucket(bucket_name=self.bucket)
        except S3Error as e:
            # bucket creation may race with another worker
            log.warning("bucket_init_failed", bucket=self.bucket, code=e.code)

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            bucket_name=self.bucket, object_name=_safe_key(key), data=io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    def get_bytes(self, key: str) -> tuple[bytes, str]:
        try:
            response = self._client.get_object(bucket_name=self.bucket, object_name=_safe_key(key))
            try:
                data = response.read()
                content_type = response.headers.get("Content-Type", "application/octet-stream")
            finally:
                response.close()
                response.release_conn()
            return data, content_type
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise FileNotFoundError(f"Object not found: {key}")
            raise

    def delete(self, key: str) -> None:
        self._client.remove_object(bucket_name=self.bucket, object_name=_safe_key(key))


def build_upload_store(cfg: Settings) -> UploadStore:
    match cfg.upload_backend:
        case "local":
            return LocalUploadStore(cfg.upload_dir)
        case "s3":
            return S3UploadStore(cfg)
        case other:
            raise ValueError(f"Unknown upload backend: {other}")


@lru_cache(maxsize=1)
def get_upload_store() -> UploadStore:
    return build_upload_store(settings)
