"""Tests for image uploads and serving stored images."""

import re
from pathlib import Path

import pytest

from cms.services.errors import UploadRejected
from cms.services.uploads import (
    check_image_type,
    ensure_upload_dirs,
    generate_filename,
    validate_path_segment,
)

PNG_HEADER = b"\x89PNG\r\n\x1a\n"
MB = 1024 * 1024


def _png(size: int) -> bytes:
    return PNG_HEADER + b"\0" * (size - len(PNG_HEADER))


def _blog_dir(settings) -> Path:
    return Path(settings.public_dir) / "blog-images"


async def test_blog_image_upload(client, admin_headers, mock_settings):
    response = await client.post(
        "/api/blog-images",
        files={"image": ("Cover.PNG", _png(2 * MB), "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert re.fullmatch(r"\d+-\d+\.png", body["filename"])
    assert body["url"] == f"/blog-images/{body['filename']}"
    stored = _blog_dir(mock_settings) / body["filename"]
    assert stored.stat().st_size == 2 * MB


async def test_two_uploads_get_distinct_names(client, admin_headers, mock_settings):
    names = set()
    for _ in range(2):
        response = await client.post(
            "/api/blog-images",
            files={"image": ("a.png", _png(1024), "image/png")},
            headers=admin_headers,
        )
        names.add(response.json()["filename"])

    assert len(names) == 2
    assert {p.name for p in _blog_dir(mock_settings).iterdir()} == names


async def test_case_study_image_upload(client, admin_headers):
    response = await client.post(
        "/api/case-study-images",
        files={"image": ("team.jpg", b"\xff\xd8\xff" + b"0" * 100, "image/jpeg")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["imageUrl"].startswith("/case-study-images/")
    assert body["message"] == "Image uploaded successfully"


async def test_oversized_upload_is_rejected_and_not_written(
    client, admin_headers, mock_settings
):
    response = await client.post(
        "/api/blog-images",
        files={"image": ("big.jpg", b"\xff\xd8\xff" + b"0" * (6 * MB), "image/jpeg")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Image exceeds the 5 MB limit",
    }
    directory = _blog_dir(mock_settings)
    assert not directory.exists() or not any(directory.iterdir())


async def test_non_image_is_rejected(client, admin_headers, mock_settings):
    response = await client.post(
        "/api/blog-images",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"


async def test_missing_file_is_rejected(client, admin_headers):
    response = await client.post(
        "/api/blog-images", data={"other": "x"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "No image file provided"


async def test_upload_requires_admin_session(client, mock_settings):
    response = await client.post(
        "/api/blog-images",
        files={"image": ("a.png", _png(1024), "image/png")},
    )

    assert response.status_code == 401
    assert not _blog_dir(mock_settings).exists()


async def test_uploaded_image_is_served(client, admin_headers):
    upload = await client.post(
        "/api/blog-images",
        files={"image": ("a.png", _png(2048), "image/png")},
        headers=admin_headers,
    )
    url = upload.json()["url"]

    response = await client.get(url)

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == _png(2048)


async def test_unknown_or_unsafe_image_is_404(client, mock_settings):
    ensure_upload_dirs()

    assert (await client.get("/blog-images/missing.png")).status_code == 404
    assert (await client.get("/case-study-images/.hidden")).status_code == 404


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("photo.JPG", "image/jpeg"),
        ("photo.jpeg", "image/jpg"),
        ("anim.gif", "image/gif"),
        ("pic.webp", "image/webp"),
    ],
)
def test_check_image_type_accepts(filename, content_type):
    assert check_image_type(filename, content_type) == Path(filename).suffix.lower()


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("photo.png", "application/octet-stream"),
        ("script.svg", "image/svg+xml"),
        ("photo", "image/png"),
        ("photo.png", None),
    ],
)
def test_check_image_type_rejects(filename, content_type):
    with pytest.raises(UploadRejected):
        check_image_type(filename, content_type)


def test_generate_filename_shape():
    assert re.fullmatch(r"\d{13}-\d{1,9}\.webp", generate_filename(".webp"))


@pytest.mark.parametrize("segment", ["", "..", "../x.png", "a/b.png", "a\\b.png", ".env"])
def test_validate_path_segment_rejects(segment):
    with pytest.raises(ValueError):
        validate_path_segment(segment)


def test_ensure_upload_dirs_is_idempotent(mock_settings):
    created = ensure_upload_dirs()

    assert {p.name for p in created} == {"blog-images", "case-study-images"}
    assert ensure_upload_dirs() == []
