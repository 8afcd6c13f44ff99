"""
Upload validation and image store tests.
"""
import io
import os

import pytest
from fastapi import HTTPException, UploadFile

from gallery_api.images import ImageStore, InvalidImageName, extension_of, is_allowed_image
from gallery_api.validation import (
    read_image_uploads,
    validate_file_count,
    validate_file_size,
    validate_image_filename,
)


def test_validate_file_size_valid():
    assert validate_file_size(5 * 1024 * 1024) is True


def test_validate_file_size_at_limit():
    assert validate_file_size(20 * 1024 * 1024, max_size_mb=20) is True


def test_validate_file_size_exceeds_limit():
    with pytest.raises(HTTPException) as exc_info:
        validate_file_size(20 * 1024 * 1024 + 1, max_size_mb=20)
    assert exc_info.value.status_code == 413
    assert "exceeds" in str(exc_info.value.detail).lower()


@pytest.mark.parametrize("count", [0, 11])
def test_validate_file_count_rejects(count):
    with pytest.raises(HTTPException) as exc_info:
        validate_file_count(count, max_files=10)
    assert exc_info.value.status_code == 400


def test_validate_file_count_accepts_limit():
    assert validate_file_count(10, max_files=10) is True


@pytest.mark.parametrize("filename", ["photo.exe", "photo", "", None, "photo.png.exe", "photo.jpgx"])
def test_validate_image_filename_rejects(filename):
    with pytest.raises(HTTPException) as exc_info:
        validate_image_filename(filename)
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize("filename", ["a.jpg", "a.JPEG", "a.png", "a.webp", "a.tiff", "a.tif", "x.y.PNG"])
def test_allowed_image_names(filename):
    assert is_allowed_image(filename)
    assert validate_image_filename(filename) is True


def test_extension_of_keeps_case():
    assert extension_of("Photo.JPG") == ".JPG"
    assert extension_of("noext") == ""


def test_read_image_uploads_checks_all_names_first():
    good = UploadFile(file=io.BytesIO(b"png"), filename="a.png")
    bad = UploadFile(file=io.BytesIO(b"MZ"), filename="b.exe")

    with pytest.raises(HTTPException):
        read_image_uploads([good, bad], max_size_mb=20)
    # rejected before any content was consumed
    assert good.file.tell() == 0


def test_read_image_uploads_returns_content():
    upload = UploadFile(file=io.BytesIO(b"png-bytes"), filename="a.png")

    assert read_image_uploads([upload], max_size_mb=20) == [("a.png", b"png-bytes")]


class TestImageStore:

    @pytest.fixture
    def store(self, tmp_path):
        store = ImageStore(tmp_path / "images")
        store.ensure()
        return store

    def test_save_uses_generated_name(self, store):
        saved = store.save("Holiday.JPG", b"data")

        assert saved["name"].startswith("work-")
        assert saved["name"].endswith(".JPG")
        assert saved["url"] == "/images/" + saved["name"]
        assert (store.upload_dir / saved["name"]).read_bytes() == b"data"

    @pytest.mark.parametrize("name", ["", ".", "..", "../x.png", "a/b.png", "a\\b.png", "/etc/passwd"])
    def test_resolve_rejects_outside_names(self, store, name):
        with pytest.raises(InvalidImageName):
            store.resolve(name)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_delete_symlink_removes_link_not_outside_target(self, store, tmp_path):
        target = tmp_path / "outside.png"
        target.write_bytes(b"x")
        link = store.upload_dir / "link.png"
        try:
            link.symlink_to(target)
        except OSError:
            pytest.skip("cannot create symlink")

        assert store.delete("link.png") is True
        assert not link.is_symlink()
        assert target.read_bytes() == b"x"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_delete_symlink_keeps_sibling_target(self, store):
        target = store.upload_dir / "work-1.png"
        target.write_bytes(b"original")
        link = store.upload_dir / "alias.png"
        try:
            link.symlink_to(target)
        except OSError:
            pytest.skip("cannot create symlink")

        assert store.delete("alias.png") is True
        assert not link.is_symlink()
        assert target.read_bytes() == b"original"
        assert [img["name"] for img in store.list()] == ["work-1.png"]

    def test_discard_ignores_missing_and_invalid(self, store):
        store.discard("work-0.png")
        store.discard("../x.png")

    def test_delete(self, store):
        name = store.save("a.png", b"x")["name"]

        assert store.delete(name) is True
        assert store.delete(name) is False
        assert store.list() == []
