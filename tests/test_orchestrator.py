"""Tests for trying credential sets in priority order."""

import os
import sys
from unittest.mock import Mock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from sharesync.backends import MemoryShareBackend
from sharesync.core import (
    ConnectionOrchestrator, CredentialSet, ShareConnection, default_credential_sets
)

from conftest import HOST, USERNAME, PASSWORD


class TestDefaultCredentialSets:
    """Test the default candidate list."""

    def test_order_and_contents(self):
        """Standard, none, local identity, then the host as domain."""
        with patch("sharesync.core.orchestrator.getpass.getuser", return_value="svc"):
            sets = default_credential_sets(USERNAME, PASSWORD, HOST)

        assert [s.label for s in sets] == [
            "standard", "no credentials", "current local identity", "IP as domain"
        ]
        assert sets[0].principal == USERNAME
        assert sets[1].is_anonymous
        assert sets[2].principal == "svc"
        assert sets[2].password == ""
        assert sets[3].principal == f"{HOST}\\{USERNAME}"
        assert sets[3].password == PASSWORD

    def test_configured_domain_kept_for_standard(self):
        """The configured domain only qualifies the standard set."""
        sets = default_credential_sets(USERNAME, PASSWORD, HOST, domain="CORP")
        assert sets[0].principal == f"CORP\\{USERNAME}"

    def test_unknown_local_user(self):
        """A process without a resolvable user still gets four candidates."""
        with patch("sharesync.core.orchestrator.getpass.getuser", side_effect=KeyError("uid")):
            sets = default_credential_sets(USERNAME, PASSWORD, HOST)

        assert len(sets) == 4
        assert sets[2].principal is None


class TestConnectionOrchestrator:
    """Test first-success orchestration."""

    def setup_method(self):
        """Set up test fixtures."""
        self.share = f"\\\\{HOST}\\Result"
        with patch("sharesync.core.orchestrator.getpass.getuser", return_value="svc"):
            self.sets = default_credential_sets(USERNAME, PASSWORD, HOST)

    def test_first_set_wins(self):
        """Later sets are not tried once one connects."""
        backend = MemoryShareBackend(accounts={USERNAME: PASSWORD})
        orchestrator = ConnectionOrchestrator(self.share, backend)

        connection = orchestrator.connect_first(self.sets)

        assert connection is not None
        assert connection.is_connected
        assert orchestrator.last_report.tried == ["standard"]
        assert orchestrator.last_report.succeeded_with == "standard"
        connection.disconnect()

    def test_falls_through_to_host_as_domain(self):
        """A workgroup machine accepting only host-qualified accounts is found last."""
        backend = MemoryShareBackend(accounts={f"{HOST}\\{USERNAME}": PASSWORD})
        orchestrator = ConnectionOrchestrator(self.share, backend)

        connection = orchestrator.connect_first(self.sets)

        assert connection is not None
        assert connection.credentials.label == "IP as domain"
        report = orchestrator.last_report
        assert report.success
        assert report.tried == [
            "standard", "no credentials", "current local identity", "IP as domain"
        ]
        assert len(report.errors) == 3
        connection.disconnect()

    def test_local_identity(self):
        """The local account is tried with an empty password."""
        backend = MemoryShareBackend(accounts={"svc": ""})
        orchestrator = ConnectionOrchestrator(self.share, backend)

        connection = orchestrator.connect_first(self.sets)

        assert orchestrator.last_report.succeeded_with == "current local identity"
        connection.disconnect()

    def test_all_fail(self):
        """Total failure returns None and reports every error."""
        backend = MemoryShareBackend(accounts={"nobody": "x"})
        orchestrator = ConnectionOrchestrator(self.share, backend)

        assert orchestrator.connect_first(self.sets) is None

        report = orchestrator.last_report
        assert not report.success
        assert report.succeeded_with is None
        assert len(report.errors) == 4
        assert report.errors[0].startswith("standard: error code 5")

    def test_each_set_forces_reconnect(self):
        """Every candidate starts from a torn-down connection."""
        backend = MemoryShareBackend(accounts={"nobody": "x"})
        ConnectionOrchestrator(self.share, backend).connect_first(self.sets)

        assert backend.disconnect_calls == len(self.sets)

    def test_probe_disconnects(self):
        """probe releases the winning connection again."""
        backend = MemoryShareBackend(accounts={USERNAME: PASSWORD})

        report = ConnectionOrchestrator(self.share, backend).probe(self.sets)

        assert report.success
        assert backend.sessions == set()

    def test_connection_factory(self):
        """Connections are built by the injected factory."""
        backend = MemoryShareBackend(accounts={USERNAME: PASSWORD})
        factory = Mock(side_effect=ShareConnection)
        orchestrator = ConnectionOrchestrator(self.share, backend, connection_factory=factory)

        connection = orchestrator.connect_first([CredentialSet(USERNAME, PASSWORD)])

        factory.assert_called_once_with(orchestrator.share_path, CredentialSet(USERNAME, PASSWORD),
                                        backend)
        connection.disconnect()

    def test_rejects_bad_share_path(self):
        """The share path is validated up front."""
        with pytest.raises(ValueError):
            ConnectionOrchestrator("not-a-share", MemoryShareBackend())
