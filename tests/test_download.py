import pytest

from semaphore_installer.download import download_file
from semaphore_installer.errors import DownloadError

from fakes import FakeResponse, FakeSession

URL = "https://example.com/semaphore.deb"


def test_download_writes_destination(tmp_path):
    session = FakeSession()
    session.add_bytes(URL, b"x" * 20000)
    destination = tmp_path / "semaphore.deb"

    assert download_file(session, URL, destination) == destination
    assert destination.read_bytes() == b"x" * 20000


def test_download_http_error_leaves_no_file(tmp_path):
    session = FakeSession()
    session.add_bytes(URL, b"Not Found", status_code=404)
    destination = tmp_path / "semaphore.deb"

    with pytest.raises(DownloadError):
        download_file(session, URL, destination)
    assert not destination.exists()


def test_download_requires_url(tmp_path):
    with pytest.raises(DownloadError, match="No download URL"):
        download_file(FakeSession(), "", tmp_path / "semaphore.deb")


def test_download_into_missing_directory(tmp_path):
    session = FakeSession()
    session.add_bytes(URL, b"data")

    with pytest.raises(DownloadError, match="Could not write"):
        download_file(session, URL, tmp_path / "missing" / "semaphore.deb")


def test_malformed_content_length_is_ignored(tmp_path):
    session = FakeSession()
    session.routes[URL] = FakeResponse(200, b"x" * 100, headers={"content-length": "abc"})
    destination = tmp_path / "semaphore.deb"

    download_file(session, URL, destination)

    assert destination.read_bytes() == b"x" * 100
