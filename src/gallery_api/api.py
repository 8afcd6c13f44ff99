"""
Image and article REST endpoints.
"""
import logging
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Request, UploadFile, status
from sqlalchemy.orm import Session

from .articles import ArticleStore, ArticleValidationError
from .audit import record_audit
from .config import Settings
from .database import get_db
from .images import ImageStore, InvalidImageName
from .schemas import ArticleCreated, ImageInfo, SuccessResponse, UploadResponse
from .validation import read_image_uploads, validate_file_count

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ============== DEPENDENCIES ==============

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


def get_article_store(request: Request) -> ArticleStore:
    return request.app.state.article_store


# ============== IMAGES ==============

@router.get("/images", response_model=List[ImageInfo])
def list_images(images: ImageStore = Depends(get_image_store)):
    """List image files in the upload directory"""
    try:
        return images.list()
    except OSError as e:
        logger.error(f"Failed to read upload directory {images.upload_dir}: {e}")
        raise HTTPException(status_code=500, detail="Failed to read images")


@router.post("/upload", response_model=UploadResponse)
def upload_images(
    files: Optional[List[UploadFile]] = File(None, alias="images"),
    bracket_files: Optional[List[UploadFile]] = File(None, alias="images[]"),
    images: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    """Store uploaded images under generated work-<millis><ext> names"""
    uploads = [f for f in (files or []) + (bracket_files or []) if f.filename]
    validate_file_count(len(uploads), settings.max_files_per_upload)
    accepted = read_image_uploads(uploads, settings.max_file_size_mb)

    saved = images.save_all(accepted)
    for (original, content), item in zip(accepted, saved):
        record_audit(
            db,
            action="image.upload",
            resource=item["name"],
            resource_type="image",
            metadata={"original_filename": original, "size": len(content)},
        )
    logger.info(f"action=upload count={len(saved)} names={[item['name'] for item in saved]}")
    return {"success": True, "images": saved}


@router.delete("/images/{name}", response_model=SuccessResponse)
def delete_image(
    name: str = Path(...),
    images: ImageStore = Depends(get_image_store),
    db: Session = Depends(get_db),
):
    """Delete one image from the upload directory"""
    try:
        deleted = images.delete(name)
    except InvalidImageName:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid image name")
    except OSError as e:
        logger.error(f"Failed to delete image {name}: {e}")
        record_audit(db, action="image.delete", resource=name, resource_type="image", success=False,
                     metadata={"error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to delete image")

    if not deleted:
        raise HTTPException(status_code=404, detail="Image not found")

    record_audit(db, action="image.delete", resource=name, resource_type="image")
    logger.info(f"action=delete_image name={name}")
    return {"success": True}


# ============== ARTICLES ==============

@router.get("/articles")
def list_articles(articles: ArticleStore = Depends(get_article_store)):
    """All articles as stored, newest first"""
    return articles.list()


@router.post("/articles", response_model=ArticleCreated)
def create_article(
    title: Optional[str] = Form(None),
    text: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    articles: ArticleStore = Depends(get_article_store),
    images: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    """Create an article, optionally with one attached image"""
    # Reject before the image touches the upload directory
    if not title or not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title and text are required")

    image_url = None
    saved = None
    if image is not None and image.filename:
        [(original, content)] = read_image_uploads([image], settings.max_file_size_mb)
        saved = images.save(original, content)
        image_url = saved["url"]

    try:
        article = articles.create(title, text, image_url)
    except ArticleValidationError as e:
        if saved:
            images.discard(saved["name"])
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (OSError, ClientError, BotoCoreError) as e:
        logger.error(f"Failed to save article {title!r}: {e}")
        if saved:
            images.discard(saved["name"])
        raise HTTPException(status_code=500, detail="Failed to save article")

    if saved:
        record_audit(db, action="image.upload", resource=saved["name"], resource_type="image",
                     metadata={"original_filename": original, "size": len(content)})
    record_audit(db, action="article.create", resource=article["id"], resource_type="article",
                 metadata={"title": article["title"], "image": image_url})
    logger.info(f"action=create_article id={article['id']} image={image_url}")
    return {"success": True, "article": article}


@router.delete("/articles/{article_id}", response_model=SuccessResponse)
def delete_article(
    article_id: str = Path(...),
    articles: ArticleStore = Depends(get_article_store),
    db: Session = Depends(get_db),
):
    """Delete an article by id"""
    if not articles.delete(article_id):
        raise HTTPException(status_code=404, detail="Article not found")

    record_audit(db, action="article.delete", resource=article_id, resource_type="article")
    logger.info(f"action=delete_article id={article_id}")
    return {"success": True}
