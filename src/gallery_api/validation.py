"""
Upload validation: file count, file type and file size.
Checks raise HTTPException so handlers can call them inline.
"""
from typing import List, Optional, Tuple

from fastapi import HTTPException, UploadFile, status

from .images import is_allowed_image

ONLY_IMAGES_MESSAGE = "Only images allowed (jpg, png, webp, tiff)"


def validate_file_count(count: int, max_files: int) -> bool:
    """
    Raises:
        HTTPException 400 if no files were sent or more than max_files
    """
    if count == 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")
    if count > max_files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files (max {max_files} per request)"
        )
    return True


def validate_image_filename(filename: Optional[str]) -> bool:
    """
    Check the client-supplied filename against the image extension allow-list.
    File content is not inspected.

    Raises:
        HTTPException 400 if the extension is not allowed
    """
    if not filename or not is_allowed_image(filename):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ONLY_IMAGES_MESSAGE)
    return True


def validate_file_size(file_size_bytes: int, max_size_mb: int = 20) -> bool:
    """
    Validate file size.

    Args:
        file_size_bytes: Size of file in bytes
        max_size_mb: Maximum allowed size in MB

    Returns:
        True if file size is valid

    Raises:
        HTTPException 413 if file is too large
    """
    max_bytes = max_size_mb * 1024 * 1024
    if file_size_bytes > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds {max_size_mb}MB limit"
        )
    return True


def read_image_uploads(uploads: List[UploadFile], max_size_mb: int) -> List[Tuple[str, bytes]]:
    """
    Validate every upload before any of them is written, then return
    (original_filename, content) pairs.
    """
    for upload in uploads:
        validate_image_filename(upload.filename)

    limit = max_size_mb * 1024 * 1024
    accepted = []
    for upload in uploads:
        # Never hold more than limit + 1 bytes of an oversized file
        content = upload.file.read(limit + 1)
        validate_file_size(len(content), max_size_mb)
        accepted.append((upload.filename, content))
    return accepted
