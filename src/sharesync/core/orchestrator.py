"""Tries a prioritized list of credential sets until one connects."""

import getpass
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

from .connection import ShareConnection, ShareConnectionError
from .models import CredentialSet
from ..backends.base import ShareBackend
from ..utils.logging import get_logger
from ..utils.paths import SharePath


def default_credential_sets(
    username: str,
    password: str,
    host: str,
    domain: str = ""
) -> List[CredentialSet]:
    """The usual candidates for an unattended process, most likely first.

    1. the configured account ("standard"),
    2. nothing at all ("no credentials"),
    3. the local account running this process, with no password ("current local identity"),
    4. the configured account qualified by the host itself ("IP as domain"), which
       addresses a local account on a workgroup machine.
    """
    try:
        local_user = getpass.getuser()
    except (KeyError, OSError):
        local_user = ""

    return [
        CredentialSet(username, password, domain, label="standard"),
        CredentialSet(label="no credentials"),
        CredentialSet(local_user, "", "", label="current local identity"),
        CredentialSet(username, password, host, label="IP as domain"),
    ]


@dataclass
class OrchestrationReport:
    """What happened for each credential set tried."""

    share_path: str
    tried: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    succeeded_with: Optional[str] = None

    @property
    def success(self) -> bool:
        """True when one credential set connected."""
        return self.succeeded_with is not None


class ConnectionOrchestrator:
    """Exploratory connector for environments where the right identity is not known up front.

    Each candidate gets a fresh ShareConnection with a forced reconnect. The first
    one to connect wins; when all fail the report says so, nothing is raised.
    """

    def __init__(
        self,
        share_path: Union[SharePath, str],
        backend: ShareBackend,
        connection_factory: Callable[..., ShareConnection] = ShareConnection
    ):
        """Initialize the orchestrator.

        Args:
            share_path: Share to probe
            backend: Transport shared by every attempt
            connection_factory: Builds a connection from share path, credentials and backend
        """
        if not isinstance(share_path, SharePath):
            share_path = SharePath.parse(share_path)
        self.share_path = share_path
        self.backend = backend
        self.connection_factory = connection_factory
        self.logger = get_logger(self.__class__.__name__)
        self.last_report: Optional[OrchestrationReport] = None

    def connect_first(self, credential_sets: Sequence[CredentialSet]) -> Optional[ShareConnection]:
        """Return the first connection that succeeds, still connected, or None.

        The caller owns the returned connection and must disconnect it.
        """
        report = OrchestrationReport(share_path=str(self.share_path))
        self.last_report = report

        for credentials in credential_sets:
            report.tried.append(credentials.label)
            connection = self.connection_factory(self.share_path, credentials, self.backend)

            self.logger.info(
                "Trying credential set",
                share=str(self.share_path),
                credentials=credentials.label,
                principal=credentials.principal
            )

            try:
                connection.connect(force_reconnect=True)
            except ShareConnectionError as e:
                report.errors.append(f"{credentials.label}: error code {e.code}, {e.description}")
                self.logger.warning(
                    "Credential set failed",
                    share=str(self.share_path),
                    credentials=credentials.label,
                    code=e.code,
                    error=e.description
                )
                continue

            report.succeeded_with = credentials.label
            self.logger.info(
                "Credential set connected",
                share=str(self.share_path),
                credentials=credentials.label
            )
            return connection

        self.logger.error(
            "All credential sets failed",
            share=str(self.share_path),
            tried=report.tried
        )
        return None

    def probe(self, credential_sets: Sequence[CredentialSet]) -> OrchestrationReport:
        """Find a working credential set, then disconnect again."""
        connection = self.connect_first(credential_sets)
        if connection is not None:
            connection.disconnect()
        return self.last_report
