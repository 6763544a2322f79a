import email.utils
import urllib.error

import pytest

from mediashare.server import parse_range

from .helpers import fetch, fetch_json


def test_manifest(base_url):
    status, headers, files = fetch_json(base_url + "/api/files")

    assert status == 200
    assert headers["Content-Type"] == "application/json"
    assert files == [
        {"name": "B.JPG", "path": "/content/B.JPG", "is_dir": False, "mime_type": "image"},
        {"name": "a.png", "path": "/content/a.png", "is_dir": False, "mime_type": "image"},
        {"name": "video.mp4", "path": "/content/video.mp4", "is_dir": False, "mime_type": "video"},
    ]


def test_manifest_paths_are_served(base_url):
    _, _, files = fetch_json(base_url + "/api/files")
    for entry in files:
        status, _, _ = fetch(base_url + entry["path"])
        assert status == 200


def test_manifest_for_missing_root(manager, tmp_path):
    info = manager.start(str(tmp_path / "gone"), 0)
    status, _, files = fetch_json(f"http://127.0.0.1:{info.port}/api/files")
    assert status == 200
    assert files == []


def test_manifest_sees_new_files(base_url, media_dir):
    (media_dir / "new.gif").write_bytes(b"")
    _, _, files = fetch_json(base_url + "/api/files")
    assert "new.gif" in [f["name"] for f in files]


def test_index_page(base_url):
    status, headers, body = fetch(base_url + "/")
    assert status == 200
    assert headers["Content-Type"].startswith("text/html")
    assert b"/api/files" in body


def test_custom_index_page(media_dir):
    from mediashare import ServerManager

    manager = ServerManager(resolve_address=lambda: "127.0.0.1", host="127.0.0.1", index_html="<p>hi</p>")
    try:
        info = manager.start(str(media_dir), 0)
        _, _, body = fetch(f"http://127.0.0.1:{info.port}/")
        assert body == b"<p>hi</p>"
    finally:
        manager.stop(wait=True, timeout=5)


def test_content_file(base_url):
    status, headers, body = fetch(base_url + "/content/a.png")
    assert status == 200
    assert body == b"png-bytes"
    assert headers["Content-Type"] == "image/png"
    assert headers["Accept-Ranges"] == "bytes"
    assert headers["Content-Length"] == str(len(b"png-bytes"))


def test_content_video_type(base_url):
    _, headers, _ = fetch(base_url + "/content/video.mp4")
    assert headers["Content-Type"] == "video/mp4"


def test_content_range(base_url):
    status, headers, body = fetch(base_url + "/content/video.mp4", {"Range": "bytes=10-19"})
    assert status == 206
    assert body == bytes(range(10, 20))
    assert headers["Content-Range"] == "bytes 10-19/1024"
    assert headers["Content-Length"] == "10"


def test_content_open_ended_range(base_url):
    status, _, body = fetch(base_url + "/content/video.mp4", {"Range": "bytes=1000-"})
    assert status == 206
    assert body == (bytes(range(256)) * 4)[1000:]


def test_content_suffix_range(base_url):
    status, headers, body = fetch(base_url + "/content/video.mp4", {"Range": "bytes=-4"})
    assert status == 206
    assert body == bytes([252, 253, 254, 255])
    assert headers["Content-Range"] == "bytes 1020-1023/1024"


def test_content_unsatisfiable_range(base_url):
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        fetch(base_url + "/content/video.mp4", {"Range": "bytes=5000-"})
    assert excinfo.value.code == 416
    assert excinfo.value.headers["Content-Range"] == "bytes */1024"


def test_content_not_modified(base_url):
    _, headers, _ = fetch(base_url + "/content/a.png")
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        fetch(base_url + "/content/a.png", {"If-Modified-Since": headers["Last-Modified"]})
    assert excinfo.value.code == 304


def test_content_modified_since_old_date(base_url):
    old = email.utils.formatdate(0, usegmt=True)
    status, _, _ = fetch(base_url + "/content/a.png", {"If-Modified-Since": old})
    assert status == 200


def test_content_head(base_url):
    status, headers, body = fetch(base_url + "/content/a.png", method="HEAD")
    assert status == 200
    assert body == b""
    assert headers["Content-Length"] == str(len(b"png-bytes"))


def test_content_subdirectory_file_is_served(base_url):
    status, _, body = fetch(base_url + "/content/sub/nested.png")
    assert status == 200
    assert body == b"nested"


@pytest.mark.parametrize("path", [
    "/content/",
    "/content/sub/",
    "/content/sub",
    "/content/missing.png",
    "/content/../conftest.py",
    "/nope",
    "/api/files/extra",
])
def test_not_found(base_url, path):
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        fetch(base_url + path)
    assert excinfo.value.code == 404


def test_traversal_stays_in_root(base_url, media_dir):
    (media_dir.parent / "secret.png").write_bytes(b"secret")
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        fetch(base_url + "/content/%2e%2e/secret.png")
    assert excinfo.value.code == 404


def test_cors_header(base_url):
    for path in ["/", "/api/files", "/content/a.png"]:
        _, headers, _ = fetch(base_url + path)
        assert headers["Access-Control-Allow-Origin"] == "*"


def test_cors_preflight(base_url):
    status, headers, _ = fetch(
        base_url + "/api/files",
        {"Origin": "http://example.com", "Access-Control-Request-Headers": "x-custom"},
        method="OPTIONS",
    )
    assert status == 204
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert "GET" in headers["Access-Control-Allow-Methods"]
    assert headers["Access-Control-Allow-Headers"] == "x-custom"


@pytest.mark.parametrize("header,size,expected", [
    ("bytes=0-9", 100, (0, 9)),
    ("bytes=90-", 100, (90, 99)),
    ("bytes=90-200", 100, (90, 99)),
    ("bytes=-10", 100, (90, 99)),
    ("bytes=-500", 100, (0, 99)),
    ("bytes=100-", 100, None),
    ("bytes=5-2", 100, None),
    ("bytes=-0", 100, None),
    ("bytes=-", 100, None),
    ("bytes=0-1,5-6", 100, None),
    ("items=0-1", 100, None),
    ("bytes=0-", 0, None),
])
def test_parse_range(header, size, expected):
    assert parse_range(header, size) == expected
