"""Tests for the mounted-share backend and the backend factory."""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from sharesync.backends import (
    BackendFactory, LocalShareBackend, MemoryShareBackend, SmbProtocolBackend,
    ShareBackend, ShareBackendError, ShareErrorCode
)
from sharesync.config import ShareConfig
from sharesync.core import ShareConnection, FileCatalog, SyncEngine
from sharesync.utils import SharePath


@pytest.fixture
def mount(tmp_path):
    """A directory standing in for a mounted share."""
    root = tmp_path / "mount"
    (root / "sub").mkdir(parents=True)
    (root / "a.csv").write_bytes(b"a-content")
    (root / "sub" / "d.csv").write_bytes(b"d-content")
    return root


class TestLocalShareBackend:
    """Test the local backend against a temporary directory."""

    def setup_method(self):
        """Set up test fixtures."""
        self.share = SharePath("fileserver", "Data")

    def test_connect(self, mount):
        """A reachable mount connects regardless of credentials."""
        LocalShareBackend(mount_point=str(mount)).connect(self.share, "anyone", "pw")

    def test_connect_missing_mount(self, tmp_path):
        """A missing mount reports the bad network path code."""
        backend = LocalShareBackend(mount_point=str(tmp_path / "absent"))

        with pytest.raises(ShareBackendError) as exc_info:
            backend.connect(self.share, None, None)

        assert exc_info.value.code == int(ShareErrorCode.BAD_NETPATH)

    def test_list_entries(self, mount):
        """Entries are reported relative to the share root."""
        entries = LocalShareBackend(mount_point=str(mount)).list_entries(self.share)
        by_name = {entry.name: entry for entry in entries}

        assert set(by_name) == {"a.csv", "sub"}
        assert by_name["sub"].is_dir
        assert by_name["a.csv"].size == len(b"a-content")
        assert by_name["a.csv"].modified is not None

        sub = LocalShareBackend(mount_point=str(mount)).list_entries(self.share, "sub")
        assert [entry.relative_path for entry in sub] == ["sub/d.csv"]

    def test_open_file(self, mount):
        """Files are opened for binary reading."""
        with LocalShareBackend(mount_point=str(mount)).open_file(self.share, "sub\\d.csv") as f:
            assert f.read() == b"d-content"

    def test_resolve_rejects_escape(self, mount):
        """Relative paths cannot leave the mount."""
        with pytest.raises(ValueError):
            LocalShareBackend(mount_point=str(mount)).resolve(self.share, "../outside")

    def test_end_to_end(self, mount, tmp_path):
        """A mounted share is reached by direct access and copied from."""
        backend = LocalShareBackend(mount_point=str(mount))

        with ShareConnection(self.share, backend=backend) as conn:
            assert conn.connect(try_direct=True)
            records = FileCatalog(conn).find_by_extension("csv", recursive=True)
            copied = SyncEngine(conn).copy_latest_by_extension(
                "csv", None, tmp_path / "out", recursive=True
            )

        assert {record.relative_path for record in records} == {"a.csv", "sub/d.csv"}
        assert copied == 2
        assert (tmp_path / "out" / "sub" / "d.csv").read_bytes() == b"d-content"


class TestBackendFactory:
    """Test backend creation."""

    def test_supported_types(self):
        """All built-in transports are registered."""
        assert set(BackendFactory.get_supported_types()) >= {"smb", "local", "memory"}

    def test_create_backend(self):
        """Backends are created by type name."""
        assert isinstance(BackendFactory.create_backend("memory"), MemoryShareBackend)
        assert isinstance(BackendFactory.create_backend("SMB"), SmbProtocolBackend)

    def test_unknown_type(self):
        """Unknown types are refused."""
        with pytest.raises(ValueError):
            BackendFactory.create_backend("ftp")

    def test_create_from_config(self, tmp_path):
        """Configuration options reach the backend."""
        smb = BackendFactory.create_from_config(ShareConfig(port=1445, connection_timeout=5))
        local = BackendFactory.create_from_config(
            ShareConfig(backend="local", mount_point=str(tmp_path))
        )

        assert smb.port == 1445
        assert smb.connection_timeout == 5
        assert local.mount_point == str(tmp_path)

    def test_register_backend(self):
        """Custom transports can be registered."""
        class CustomBackend(MemoryShareBackend):
            """Memory backend under another name."""

        BackendFactory.register_backend("custom", CustomBackend)
        try:
            assert isinstance(BackendFactory.create_backend("custom"), CustomBackend)
        finally:
            BackendFactory._backend_classes.pop("custom", None)

    def test_register_rejects_non_backend(self):
        """Only ShareBackend subclasses can be registered."""
        with pytest.raises(ValueError):
            BackendFactory.register_backend("bogus", object)
        assert issubclass(MemoryShareBackend, ShareBackend)
