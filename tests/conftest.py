"""
Pytest configuration and shared fixtures for all tests
"""
import io
import sys
from pathlib import Path

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

# Add src to Python path for imports
SRC = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC))

from gallery_api.config import Settings  # noqa: E402
from gallery_api.main import create_app  # noqa: E402

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06"
    b"\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01"
    b"\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


class FakeS3:
    """Stands in for a boto3 S3 client; keeps objects in a dict."""

    def __init__(self):
        self.store = {}

    def put_object(self, Bucket, Key, Body, ContentType=None):
        if isinstance(Body, str):
            Body = Body.encode()
        self.store[(Bucket, Key)] = Body

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.store:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        return {"Body": io.BytesIO(self.store[(Bucket, Key)])}


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a per-test temporary directory"""
    public_dir = tmp_path / "public"
    admin_dir = tmp_path / "admin"
    data_dir = tmp_path / "data"
    public_dir.mkdir()
    admin_dir.mkdir()
    (public_dir / "index.html").write_text("<h1>Gallery</h1>")
    (public_dir / "style.css").write_text("body {}")
    (admin_dir / "index.html").write_text("<h1>Admin panel</h1>")
    return Settings(
        public_dir=public_dir,
        admin_dir=admin_dir,
        upload_dir=public_dir / "images",
        data_dir=data_dir,
        articles_file=data_dir / "articles.json",
        database_url="sqlite:///:memory:",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def fake_s3():
    return FakeS3()
