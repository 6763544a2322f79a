import pytest

from mediashare import ServerManager


@pytest.fixture
def media_dir(tmp_path):
    root = tmp_path / "media"
    root.mkdir()
    (root / "a.png").write_bytes(b"png-bytes")
    (root / "B.JPG").write_bytes(b"jpg-bytes")
    (root / "video.mp4").write_bytes(bytes(range(256)) * 4)
    (root / "readme.txt").write_text("not media")
    (root / "sub").mkdir()
    (root / "sub" / "nested.png").write_bytes(b"nested")
    return root


@pytest.fixture
def manager():
    manager = ServerManager(resolve_address=lambda: "127.0.0.1", host="127.0.0.1")
    yield manager
    manager.stop(wait=True, timeout=5)


@pytest.fixture
def base_url(manager, media_dir):
    info = manager.start(str(media_dir), 0)
    return f"http://127.0.0.1:{info.port}"
