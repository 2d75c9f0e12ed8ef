"""
Uploads, image transcoding, serving headers and the file id contract.
"""
import io
import re
import struct
import zlib

import pytest
from PIL import Image

from navigator.errors import InvalidInput
from navigator.services.files import generate_filename, transcode_image


def _png(width: int, height: int, mode: str = "RGBA") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def _png_header_only(width: int, height: int) -> bytes:
    """PNG signature, IHDR and an empty IDAT: enough for Pillow to read the declared size."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")


def _upload(client, headers, name, data, mime):
    return client.post("/api/upload", files={"file": (name, data, mime)}, headers=headers)


def test_generate_filename_shape():
    name = generate_filename("report.final.PDF", now_ms=1700000000000)
    assert re.fullmatch(r"file-1700000000000-[a-z0-9]{6}\.PDF", name)
    assert re.fullmatch(r"file-\d+-[a-z0-9]{6}", generate_filename("noext"))


def test_transcode_shrinks_and_keeps_aspect():
    out = transcode_image(_png(4000, 3000), 1920, 1080, 80)
    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "JPEG"
        assert img.mode == "RGB"
        assert img.width <= 1920 and img.height <= 1080
        assert img.size == (1440, 1080)


def test_transcode_never_enlarges():
    out = transcode_image(_png(200, 100, mode="RGB"), 1920, 1080, 80)
    with Image.open(io.BytesIO(out)) as img:
        assert img.size == (200, 100)


def test_upload_image_is_transcoded(client, make_user, auth_headers):
    headers = auth_headers(make_user())
    r = _upload(client, headers, "photo.png", _png(4000, 3000), "image/png")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "File uploaded successfully"
    uploaded = body["file"]
    assert uploaded["mimeType"] == "image/jpeg"
    assert uploaded["originalName"] == "photo.png"
    assert uploaded["url"] == f"/api/files/{uploaded['id']}"
    assert re.fullmatch(r"file-\d+-[a-z0-9]{6}\.png", uploaded["filename"])

    served = client.get(uploaded["url"])
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/jpeg"
    assert int(served.headers["content-length"]) == uploaded["size"] == len(served.content)
    with Image.open(io.BytesIO(served.content)) as img:
        assert img.width <= 1920 and img.height <= 1080


def test_non_image_stored_unmodified(client, make_user, auth_headers):
    payload = b"name,score\nalice,3\n"
    r = _upload(client, auth_headers(make_user()), "scores.csv", payload, "text/csv")
    assert r.status_code == 200, r.text
    uploaded = r.json()["file"]
    assert uploaded["mimeType"] == "text/csv"
    assert uploaded["size"] == len(payload)

    served = client.get(f"/api/files/{uploaded['id']}")
    assert served.content == payload
    assert served.headers["content-type"].startswith("text/csv")
    assert served.headers["cache-control"] == "public, max-age=31536000"
    assert served.headers["content-disposition"] == 'inline; filename="scores.csv"'


def test_file_info(client, make_user, auth_headers):
    r = _upload(client, auth_headers(make_user()), "notes.txt", b"hello", "text/plain")
    file_id = r.json()["file"]["id"]
    info = client.get(f"/api/files/{file_id}/info")
    assert info.status_code == 200
    body = info.json()
    assert body["id"] == file_id
    assert body["originalName"] == "notes.txt"
    assert body["mimeType"] == "text/plain"
    assert body["size"] == 5
    assert "data" not in body


def test_file_id_contract(client):
    for path in ("/api/files/abc", "/api/files/abc/info", "/api/files/-1"):
        r = client.get(path)
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid file ID"}
    for path in ("/api/files/999", "/api/files/999/info"):
        r = client.get(path)
        assert r.status_code == 404
        assert r.json() == {"error": "File not found"}


def test_upload_requires_token(client):
    r = client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert r.status_code == 401


def test_upload_without_file(client, make_user, auth_headers):
    headers = auth_headers(make_user())
    r = client.post("/api/upload", data={"other": "value"}, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "No file uploaded"}
    empty = _upload(client, headers, "empty.txt", b"", "text/plain")
    assert empty.status_code == 400
    assert empty.json() == {"error": "No file uploaded"}


def test_upload_too_large(client, make_user, auth_headers):
    r = _upload(client, auth_headers(make_user()), "big.bin", b"\0" * (2 * 1024 * 1024 + 1), "application/octet-stream")
    assert r.status_code == 400
    assert r.json()["error"].startswith("File too large")


def test_undecodable_image_rejected(client, make_user, auth_headers):
    r = _upload(client, auth_headers(make_user()), "broken.png", b"definitely not a png", "image/png")
    assert r.status_code == 400
    assert r.json() == {"error": "Uploaded image could not be processed"}


def test_transcode_rejects_images_over_pixel_cap():
    with pytest.raises(InvalidInput) as exc:
        transcode_image(_png(300, 300, mode="RGB"), 1920, 1080, 80, max_pixels=10_000)
    assert exc.value.message == "Uploaded image could not be processed"


def test_decompression_bomb_rejected(client, make_user, auth_headers):
    # a tiny file declaring 20000x10000 pixels
    bomb = _png_header_only(20000, 10000)
    r = _upload(client, auth_headers(make_user()), "bomb.png", bomb, "image/png")
    assert r.status_code == 400
    assert r.json() == {"error": "Uploaded image could not be processed"}
