from typing import Optional, Dict, Any, List
from datetime import datetime
from pydantic import BaseModel


class Article(BaseModel):
    id: str
    title: str
    text: str
    image: Optional[str] = None
    date: str


class ArticleCreated(BaseModel):
    success: bool = True
    article: Article


class ImageInfo(BaseModel):
    name: str
    url: str
    path: str


class UploadedImage(BaseModel):
    name: str
    url: str


class UploadResponse(BaseModel):
    success: bool = True
    images: List[UploadedImage]


class SuccessResponse(BaseModel):
    success: bool = True


class AuditLogOut(BaseModel):
    id: int
    action: str
    resource: Optional[str] = None
    resource_type: Optional[str] = None
    success: bool
    metadata_json: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True
