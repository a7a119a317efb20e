"""Cloudflare R2 object storage for generated audio."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError


class R2Storage:
    """Uploads audio files to an R2 bucket through its S3-compatible API."""

    def __init__(
        self,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket_name: str,
        public_url: Optional[str] = None,
        key_prefix: str = "blog-audio",
        s3_client: Optional[Any] = None,
    ):
        """
        Initialize R2 storage.

        Args:
            account_id: Cloudflare account ID
            access_key_id: R2 access key ID
            secret_access_key: R2 secret access key
            bucket_name: Bucket name
            public_url: Public base URL (defaults to https://<bucket>.r2.dev)
            key_prefix: Prefix of generated audio keys
            s3_client: Pre-built S3 client
        """
        if not all([account_id, access_key_id, secret_access_key, bucket_name]):
            raise ValueError("Missing required Cloudflare R2 configuration")

        self.bucket_name = bucket_name
        self.public_url_base = (public_url or f"https://{bucket_name}.r2.dev").rstrip("/")
        self.key_prefix = key_prefix.strip("/")
        self.logger = logging.getLogger(__name__)

        self.s3 = s3_client or boto3.client(
            "s3",
            endpoint_url=f"https://{account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name="auto",
            config=Config(signature_version="s3v4"),
        )

    @classmethod
    def from_config(cls, storage_config) -> "R2Storage":
        """Create storage from a StorageConfig section."""
        return cls(
            account_id=storage_config.account_id,
            access_key_id=storage_config.access_key_id,
            secret_access_key=storage_config.secret_access_key,
            bucket_name=storage_config.bucket_name,
            public_url=storage_config.public_url,
            key_prefix=storage_config.key_prefix,
        )

    def generate_audio_key(
        self, slug: str, when: Optional[datetime] = None, extension: str = "opus"
    ) -> str:
        """Build ``<prefix>/YYYY/MM/<slug>.<extension>``."""
        when = when or datetime.now()
        return f"{self.key_prefix}/{when.year}/{when.month:02d}/{slug}.{extension}"

    def public_url(self, key: str) -> str:
        return f"{self.public_url_base}/{key}"

    def exists(self, key: str) -> bool:
        """Check whether an object exists; other errors are raised."""
        try:
            self.s3.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            error = e.response.get("Error", {})
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if status == 404 or error.get("Code") in ("404", "NotFound", "NoSuchKey"):
                return False
            raise

    def upload_audio(
        self,
        data: bytes,
        key: str,
        metadata: Optional[Dict[str, str]] = None,
        content_type: str = "audio/opus",
    ) -> str:
        """
        Upload audio bytes.

        Args:
            data: Audio content
            key: Object key
            metadata: Extra object metadata (string values)
            content_type: MIME type of the audio

        Returns:
            Public URL of the uploaded object
        """
        object_metadata = {k: str(v) for k, v in (metadata or {}).items()}
        object_metadata["uploadedAt"] = datetime.now(timezone.utc).isoformat()

        self.logger.debug(f"Uploading {len(data)} bytes to {self.bucket_name}/{key}")
        self.s3.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=data,
            ContentType=content_type,
            Metadata=object_metadata,
        )
        return self.public_url(key)
