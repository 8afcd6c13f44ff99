"""
Persistence backends for the article document.
Each backend holds one JSON array and exposes load() / save(collection).
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings

logger = logging.getLogger(__name__)

Collection = List[Dict[str, Any]]


def _decode(raw: str, source: str) -> Collection:
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Article document {source} is not valid JSON, treating as empty: {e}")
        return []
    if not isinstance(data, list):
        logger.warning(f"Article document {source} is not a JSON array, treating as empty")
        return []
    records = [item for item in data if isinstance(item, dict)]
    if len(records) != len(data):
        logger.warning(f"Skipped {len(data) - len(records)} non-object entries in article document {source}")
    return records


def _encode(collection: Collection) -> str:
    return json.dumps(collection, indent=2, ensure_ascii=False)


class JsonFileBackend:
    """Article document stored as a JSON file on local disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("[]", encoding="utf-8")

    def load(self) -> Collection:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot read {self.path}, treating as empty: {e}")
            return []
        return _decode(raw, str(self.path))

    def save(self, collection: Collection) -> None:
        # Plain overwrite, not write-then-rename
        with self.path.open("w", encoding="utf-8") as f:
            f.write(_encode(collection))


class S3Backend:
    """Article document stored as a single object in an S3 bucket."""

    def __init__(self, bucket: str, key: str, region: str = "us-east-1", client: Optional[Any] = None):
        self.bucket = bucket
        self.key = key
        self.client = client or boto3.client("s3", region_name=region)

    def ensure(self) -> None:
        pass

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    def load(self) -> Collection:
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=self.key)
            raw = resp["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Cannot read {self.uri}, treating as empty: {e}")
            return []
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning(f"Article document {self.uri} is not UTF-8, treating as empty: {e}")
                return []
        return _decode(raw, self.uri)

    def save(self, collection: Collection) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=self.key,
            Body=_encode(collection).encode("utf-8"),
            ContentType="application/json",
        )


def make_backend(settings: Settings):
    if settings.article_backend == "file":
        return JsonFileBackend(settings.articles_file)
    if settings.article_backend == "s3":
        return S3Backend(settings.s3_bucket, settings.s3_articles_key, region=settings.aws_region)
    raise ValueError(f"Unknown ARTICLE_BACKEND: {settings.article_backend!r} (expected 'file' or 's3')")
