"""MinIO-backed media store for meeting background images."""
import base64
import binascii
import logging
import uuid
from io import BytesIO
from typing import Optional

from minio import Minio

from huddle.core.config import (
    MINIO_ENDPOINT,
    MINIO_ACCESS_KEY,
    MINIO_SECRET_KEY,
    MINIO_SECURE,
    MINIO_BUCKET,
    MEDIA_PUBLIC_URL,
)
from huddle.core.errors import DependencyFailure, ValidationFailed

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def decode_data_url(payload: str):
    """Split a ``data:<mime>;base64,<data>`` payload into (content_type, bytes).

    Bare base64 strings are accepted and treated as JPEG.
    """
    content_type = "image/jpeg"
    data = payload
    if payload.startswith("data:"):
        header, _, data = payload.partition(",")
        content_type = header[len("data:"):].split(";")[0] or content_type
    if content_type not in EXTENSIONS:
        raise ValidationFailed(f"Unsupported image type: {content_type}")
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailed("Image payload is not valid base64")
    if not raw:
        raise ValidationFailed("Image payload is empty")
    return content_type, raw


class MediaStore:
    def __init__(self):
        self._client: Optional[Minio] = None

    def _get_client(self) -> Minio:
        """Lazy initialization of MinIO client"""
        if self._client is None:
            client = Minio(
                endpoint=MINIO_ENDPOINT,
                access_key=MINIO_ACCESS_KEY,
                secret_key=MINIO_SECRET_KEY,
                secure=MINIO_SECURE,
            )
            if not client.bucket_exists(bucket_name=MINIO_BUCKET):
                client.make_bucket(bucket_name=MINIO_BUCKET)
                logging.info(f"Created bucket: {MINIO_BUCKET}")
            self._client = client
        return self._client

    def upload_image(self, payload: str, folder: str) -> str:
        content_type, raw = decode_data_url(payload)
        object_name = f"{folder}/{uuid.uuid4().hex}{EXTENSIONS[content_type]}"
        try:
            self._get_client().put_object(
                bucket_name=MINIO_BUCKET,
                object_name=object_name,
                data=BytesIO(raw),
                length=len(raw),
                content_type=content_type,
            )
        except Exception as e:
            logging.error(f"❌ Media upload failed for {object_name}: {e}")
            raise DependencyFailure("Failed to upload image") from e
        logging.info(f"Uploaded: {MINIO_BUCKET}/{object_name}")
        return f"{MEDIA_PUBLIC_URL}/{MINIO_BUCKET}/{object_name}"

    def delete_image(self, url: str) -> None:
        marker = f"/{MINIO_BUCKET}/"
        if marker not in url:
            raise DependencyFailure(f"Not a media store URL: {url}")
        object_name = url.split(marker, 1)[1]
        try:
            self._get_client().remove_object(bucket_name=MINIO_BUCKET, object_name=object_name)
        except Exception as e:
            logging.error(f"❌ Media delete failed for {object_name}: {e}")
            raise DependencyFailure("Failed to delete image") from e
        logging.info(f"Deleted: {MINIO_BUCKET}/{object_name}")


media_store = MediaStore()


# Dependency for FastAPI routes
def get_media_store() -> MediaStore:
    return media_store
