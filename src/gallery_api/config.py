"""
Runtime configuration.
Values come from the environment (optionally a .env file in the working directory).
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Repository root: src/gallery_api/config.py -> ../../
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ALLOWED_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "tiff", "tif")


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    public_dir: Path
    admin_dir: Path
    upload_dir: Path
    data_dir: Path
    articles_file: Path
    article_backend: str = "file"
    s3_bucket: str = "gallery-cms"
    s3_articles_key: str = "data/articles.json"
    aws_region: str = "us-east-1"
    database_url: str
    max_file_size_mb: int = 20
    max_files_per_upload: int = 10
    log_level: str = "INFO"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from environment variables, loading .env first if present."""
        load_dotenv(env_file)

        public_dir = Path(os.getenv("PUBLIC_DIR", PROJECT_ROOT / "public"))
        data_dir = Path(os.getenv("DATA_DIR", PROJECT_ROOT / "data"))
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            public_dir=public_dir,
            admin_dir=Path(os.getenv("ADMIN_DIR", PROJECT_ROOT / "admin")),
            upload_dir=Path(os.getenv("UPLOAD_DIR", public_dir / "images")),
            data_dir=data_dir,
            articles_file=Path(os.getenv("ARTICLES_FILE", data_dir / "articles.json")),
            article_backend=os.getenv("ARTICLE_BACKEND", "file").strip().lower(),
            s3_bucket=os.getenv("S3_BUCKET_NAME", "gallery-cms"),
            s3_articles_key=os.getenv("S3_ARTICLES_KEY", "data/articles.json"),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            database_url=os.getenv("DATABASE_URL") or f"sqlite:///{data_dir / 'audit.db'}",
            max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", "20")),
            max_files_per_upload=int(os.getenv("MAX_FILES_PER_UPLOAD", "10")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
