from unittest.mock import MagicMock

import pytest

from huddle.core.config import MINIO_BUCKET
from huddle.core.errors import DependencyFailure, ValidationFailed
from huddle.services.media_service import MediaStore, decode_data_url


def test_decode_data_url():
    content_type, raw = decode_data_url("data:image/png;base64,aGVsbG8=")
    assert content_type == "image/png"
    assert raw == b"hello"


def test_bare_base64_is_jpeg():
    assert decode_data_url("aGVsbG8=") == ("image/jpeg", b"hello")


@pytest.mark.parametrize("payload", [
    "data:text/plain;base64,aGVsbG8=",
    "data:image/png;base64,not base64!",
    "data:image/png;base64,",
])
def test_decode_rejects_bad_payloads(payload):
    with pytest.raises(ValidationFailed):
        decode_data_url(payload)


@pytest.fixture
def store():
    store = MediaStore()
    store._client = MagicMock()
    return store


def test_upload_returns_public_url(store):
    url = store.upload_image("data:image/png;base64,aGVsbG8=", "meetings")

    assert f"/{MINIO_BUCKET}/meetings/" in url
    assert url.endswith(".png")
    kwargs = store._client.put_object.call_args.kwargs
    assert kwargs["bucket_name"] == MINIO_BUCKET
    assert kwargs["length"] == 5
    assert kwargs["content_type"] == "image/png"


def test_upload_failure_is_dependency_failure(store):
    store._client.put_object.side_effect = RuntimeError("connection refused")
    with pytest.raises(DependencyFailure):
        store.upload_image("data:image/png;base64,aGVsbG8=", "meetings")


def test_delete_removes_object(store):
    url = store.upload_image("data:image/png;base64,aGVsbG8=", "meetings")
    store.delete_image(url)

    kwargs = store._client.remove_object.call_args.kwargs
    assert kwargs["bucket_name"] == MINIO_BUCKET
    assert url.endswith(kwargs["object_name"])


def test_delete_foreign_url(store):
    with pytest.raises(DependencyFailure):
        store.delete_image("https://elsewhere.example/picture.png")
    store._client.remove_object.assert_not_called()
