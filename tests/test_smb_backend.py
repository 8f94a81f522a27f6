"""Tests for the SMB backend with smbclient mocked out."""

import os
import sys
from datetime import datetime
from unittest.mock import Mock, patch, MagicMock

import pytest
import smbclient

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from sharesync.backends import SmbProtocolBackend, ShareBackendError, ConnectFlags
from sharesync.backends.smb import error_code_of
from sharesync.core import ShareConnection, CredentialSet, ShareConnectionError
from sharesync.utils import SharePath


def make_entry(name, is_dir=False, mtime=1704103200.0, ctime=1701424800.0, size=10):
    """Build a fake smbclient directory entry."""
    entry = Mock()
    entry.name = name
    entry.is_dir.return_value = is_dir
    entry.stat.return_value = Mock(st_mtime=mtime, st_ctime=ctime, st_size=size)
    return entry


class StatusError(Exception):
    """Exception carrying an NTSTATUS code like smbprotocol's response errors."""

    status = 0xC000006D


class TestErrorCodeOf:
    """Test error code extraction."""

    def test_status_attribute(self):
        """NTSTATUS codes win over everything else."""
        assert error_code_of(StatusError("logon failure")) == 0xC000006D

    def test_errno(self):
        """OS errors report their errno."""
        assert error_code_of(OSError(13, "Permission denied")) == 13

    def test_unknown(self):
        """Exceptions without a code report -1."""
        assert error_code_of(ValueError("boom")) == -1


class TestSmbProtocolBackend:
    """Test the smbclient calls made by the backend."""

    def setup_method(self):
        """Set up test fixtures."""
        self.share = SharePath("192.168.1.150", "Result")
        self.backend = SmbProtocolBackend(port=445, connection_timeout=15)

    def test_plain_connect(self):
        """Credentials are passed to register_session and the share is checked."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            self.backend.connect(self.share, "operator", "pw-123")

        mock_smb.register_session.assert_called_once_with(
            "192.168.1.150",
            port=445,
            connection_timeout=15,
            require_signing=True,
            auth_protocol="negotiate",
            username="operator",
            password="pw-123"
        )
        mock_smb.stat.assert_called_once_with("\\\\192.168.1.150\\Result")

    def test_interactive_connect_uses_ntlm(self):
        """The interactive rung negotiates NTLM explicitly."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            self.backend.connect(self.share, "operator", "pw-123", ConnectFlags.INTERACTIVE)

        kwargs = mock_smb.register_session.call_args.kwargs
        assert kwargs["auth_protocol"] == "ntlm"
        assert kwargs["username"] == "operator"

    def test_interactive_prompts_without_password(self):
        """With a terminal attached a missing password is prompted for."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb, \
             patch("sharesync.backends.smb.sys.stdin") as mock_stdin, \
             patch("sharesync.backends.smb.getpass.getpass", return_value="typed") as prompt:
            mock_stdin.isatty.return_value = True
            self.backend.connect(self.share, "operator", "", ConnectFlags.INTERACTIVE)

        prompt.assert_called_once()
        assert mock_smb.register_session.call_args.kwargs["password"] == "typed"

    def test_update_profile_connect(self):
        """The profile rung stores the credentials as client defaults."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            self.backend.connect(self.share, "operator", "pw-123", ConnectFlags.UPDATE_PROFILE)

        mock_smb.ClientConfig.assert_called_with(username="operator", password="pw-123")
        kwargs = mock_smb.register_session.call_args.kwargs
        assert "username" not in kwargs
        assert "password" not in kwargs

    def test_anonymous_connect(self):
        """No credentials means no username or password at all."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            self.backend.connect(self.share, None, None)

        kwargs = mock_smb.register_session.call_args.kwargs
        assert "username" not in kwargs
        mock_smb.ClientConfig.assert_not_called()

    def test_connect_failure(self):
        """Transport errors become backend errors with a code."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            mock_smb.register_session.side_effect = OSError(113, "No route to host")

            with pytest.raises(ShareBackendError) as exc_info:
                self.backend.connect(self.share, "operator", "pw-123")

        assert exc_info.value.code == 113
        assert "No route to host" in exc_info.value.description

    def test_disconnect(self):
        """The pooled session for the host is deleted."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            self.backend.disconnect(self.share)

        mock_smb.delete_session.assert_called_once_with("192.168.1.150", port=445)

    def test_disconnect_failure(self):
        """A failing delete is reported as a backend error."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            mock_smb.delete_session.side_effect = OSError(2, "no session")

            with pytest.raises(ShareBackendError):
                self.backend.disconnect(self.share)

    def test_list_entries(self):
        """scandir results become RemoteEntry objects relative to the share."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            mock_smb.scandir.return_value = [
                make_entry("."),
                make_entry(".."),
                make_entry("deeper", is_dir=True),
                make_entry("d.csv", size=42),
            ]
            entries = self.backend.list_entries(self.share, "sub")

        mock_smb.scandir.assert_called_once_with("\\\\192.168.1.150\\Result\\sub")
        assert [e.relative_path for e in entries] == ["sub/deeper", "sub/d.csv"]
        assert entries[0].is_dir
        assert entries[1].size == 42
        assert entries[1].modified == datetime.fromtimestamp(1704103200.0)
        assert entries[1].created == datetime.fromtimestamp(1701424800.0)

    def test_open_file(self):
        """Files are opened for binary reading by full UNC path."""
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            mock_smb.open_file.return_value = MagicMock()
            self.backend.open_file(self.share, "sub/d.csv")

        mock_smb.open_file.assert_called_once_with(
            "\\\\192.168.1.150\\Result\\sub\\d.csv", mode="rb"
        )

    def test_describe(self):
        """describe reports the transport settings."""
        info = self.backend.describe()
        assert info["port"] == 445
        assert info["connection_timeout"] == 15


class TestSmbLadder:
    """Test the fallback ladder over the SMB backend."""

    def test_ladder_flags(self):
        """Each rung reaches smbclient with its own settings."""
        share = SharePath("192.168.1.150", "Result")
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            mock_smb.register_session.side_effect = [
                OSError(1219, "conflict"),
                OSError(1219, "conflict"),
                None,
            ]
            conn = ShareConnection(share, CredentialSet("operator", "pw-123"),
                                   SmbProtocolBackend())

            assert conn.connect()

        assert [a.strategy for a in conn.last_attempts] == [
            "plain", "interactive", "update_profile"
        ]
        mock_smb.ClientConfig.assert_called_with(username="operator", password="pw-123")

    def test_ladder_exhausted(self):
        """The last rung's code is reported when everything fails."""
        share = SharePath("192.168.1.150", "Result")
        with patch("sharesync.backends.smb.smbclient") as mock_smb:
            mock_smb.register_session.side_effect = OSError(1326, "logon failure")
            conn = ShareConnection(share, CredentialSet("operator", "pw-123"),
                                   SmbProtocolBackend())

            with pytest.raises(ShareConnectionError) as exc_info:
                conn.connect()

        assert exc_info.value.code == 1326
        assert mock_smb.register_session.call_count == 4


class TestClientProfile:
    """Test the process-wide smbclient credential profile."""

    def setup_method(self):
        """Remember the client profile so each test can restore it."""
        profile = smbclient.ClientConfig()
        self.saved = {"username": profile.username, "password": profile.password}
        self.share = SharePath("192.168.1.150", "Result")

    def teardown_method(self):
        """Put the client profile back."""
        smbclient.ClientConfig(**self.saved)

    def test_failed_profile_connect_restores_profile(self):
        """A failed update-profile connect leaves the previous profile in place."""
        smbclient.ClientConfig(username=None, password=None)

        with patch("smbclient.register_session", side_effect=OSError(1326, "logon failure")):
            with pytest.raises(ShareBackendError):
                SmbProtocolBackend().connect(
                    self.share, "operator", "pw-123", ConnectFlags.UPDATE_PROFILE
                )

        assert smbclient.ClientConfig().username is None
        assert smbclient.ClientConfig().password is None

    def test_successful_profile_connect_keeps_profile(self):
        """A successful update-profile connect keeps the stored credentials."""
        with patch("smbclient.register_session"), patch("smbclient.stat"):
            SmbProtocolBackend().connect(
                self.share, "operator", "pw-123", ConnectFlags.UPDATE_PROFILE
            )

        assert smbclient.ClientConfig().username == "operator"

    def test_failed_ladder_leaves_no_default_credentials(self):
        """After an exhausted ladder the anonymous rung saw no stored credentials."""
        smbclient.ClientConfig(username=None, password=None)
        seen = []

        def register(host, **kwargs):
            """Record the profile visible to each attempt, then refuse the logon."""
            seen.append(smbclient.ClientConfig().username)
            raise OSError(1326, "logon failure")

        with patch("smbclient.register_session", side_effect=register), \
             patch("smbclient.delete_session"):
            conn = ShareConnection(self.share, CredentialSet("operator", "pw-123"),
                                   SmbProtocolBackend())
            with pytest.raises(ShareConnectionError):
                conn.connect()

        assert seen == [None, None, "operator", None]
        assert smbclient.ClientConfig().username is None
