"""Share connection lifecycle and the credential fallback ladder."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union, Dict, Any

from .models import ConnectionState, CredentialSet
from ..backends.base import ShareBackend, ShareBackendError, ConnectFlags
from ..backends.smb import SmbProtocolBackend
from ..utils.logging import get_logger
from ..utils.paths import SharePath


class ShareConnectionError(ConnectionError):
    """Raised when every connection strategy for a share has failed.

    Carries the error code and description of the last attempt, plus the
    outcome of every attempt that was made.
    """

    def __init__(
        self,
        share_path: str,
        code: int,
        description: str,
        attempts: Optional[List["AttemptOutcome"]] = None
    ):
        """Build the error from the last failed attempt."""
        super().__init__(
            f"Unable to connect to network share {share_path}: "
            f"error code {code}, {description}"
        )
        self.share_path = share_path
        self.code = code
        self.description = description
        self.attempts = list(attempts or [])


class ShareStateError(RuntimeError):
    """Raised when a connection is used in a state that does not allow the operation."""
    pass


@dataclass(frozen=True)
class AttemptOutcome:
    """Outcome of one strategy on the ladder."""

    strategy: str
    succeeded: bool
    code: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ConnectStrategy:
    """A named way of presenting credentials to the backend."""

    name: str
    flags: ConnectFlags = ConnectFlags.NONE
    anonymous: bool = False

    def attempt(
        self,
        backend: ShareBackend,
        share: SharePath,
        credentials: CredentialSet
    ) -> AttemptOutcome:
        """Make one connection attempt; never raises for backend failures."""
        username = None if self.anonymous else credentials.principal
        password = None if self.anonymous or username is None else credentials.password

        try:
            backend.connect(share, username, password, self.flags)
        except ShareBackendError as e:
            return AttemptOutcome(self.name, False, e.code, e.description)

        return AttemptOutcome(self.name, True)


# Tried strictly in this order. The last rung presents no credentials at all,
# which reaches shares with guest access or an already authorized session.
FALLBACK_LADDER = (
    ConnectStrategy("plain"),
    ConnectStrategy("interactive", ConnectFlags.INTERACTIVE),
    ConnectStrategy("update_profile", ConnectFlags.UPDATE_PROFILE),
    ConnectStrategy("no_credentials", anonymous=True),
)


class ShareConnection:
    """Owns one link to a remote share and its connection state."""

    def __init__(
        self,
        share_path: Union[SharePath, str],
        credentials: Optional[CredentialSet] = None,
        backend: Optional[ShareBackend] = None,
        strategies: Sequence[ConnectStrategy] = FALLBACK_LADDER
    ):
        """Initialize the connection.

        Args:
            share_path: Share to connect to, as a SharePath or UNC string
            credentials: Identity to present; defaults to no credentials
            backend: Transport to use; defaults to the SMB backend
            strategies: Ordered connection strategies for the fallback ladder
        """
        if not strategies:
            raise ValueError("At least one connection strategy is required")

        if isinstance(share_path, SharePath):
            self.share_path = share_path
        else:
            self.share_path = SharePath.parse(share_path)

        self.credentials = credentials or CredentialSet(label="no credentials")
        self.backend = backend or SmbProtocolBackend()
        self.strategies = tuple(strategies)
        self.logger = get_logger(self.__class__.__name__)

        self._state = ConnectionState.DISCONNECTED
        self._owns_session = False
        self.last_attempts: List[AttemptOutcome] = []

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True while the share is usable."""
        return self._state == ConnectionState.CONNECTED

    def connect(
        self,
        credentials: Optional[CredentialSet] = None,
        force_reconnect: bool = False,
        use_fallback: bool = True,
        try_direct: bool = False
    ) -> bool:
        """Establish the link to the share.

        Args:
            credentials: Identity to present instead of the one given at construction
            force_reconnect: Tear down any existing connection to the share first
            use_fallback: Walk the whole strategy ladder instead of only the first rung
            try_direct: Accept the share as connected if it can already be listed
                without creating a session

        Returns:
            True once connected

        Raises:
            ShareStateError: If already connected and force_reconnect is not set
            ShareConnectionError: If every strategy tried has failed
        """
        if self.is_connected and not force_reconnect:
            raise ShareStateError(
                f"Already connected to {self.share_path}; disconnect first "
                f"or pass force_reconnect"
            )

        if credentials is not None:
            self.credentials = credentials

        if force_reconnect:
            self._cancel_existing()

        if try_direct and self.try_direct_access():
            self._state = ConnectionState.CONNECTED
            self._owns_session = False
            return True

        strategies = self.strategies if use_fallback else self.strategies[:1]
        attempts: List[AttemptOutcome] = []

        self.logger.info(
            "Connecting to network share",
            share=str(self.share_path),
            principal=self.credentials.principal,
            credentials=self.credentials.label,
            strategies=[s.name for s in strategies]
        )

        for strategy in strategies:
            outcome = strategy.attempt(self.backend, self.share_path, self.credentials)
            attempts.append(outcome)

            if outcome.succeeded:
                self.last_attempts = attempts
                self._state = ConnectionState.CONNECTED
                self._owns_session = True
                self.logger.info(
                    "Connected to network share",
                    share=str(self.share_path),
                    strategy=strategy.name
                )
                return True

            self.logger.warning(
                "Connection strategy failed",
                share=str(self.share_path),
                strategy=strategy.name,
                code=outcome.code,
                error=outcome.description
            )

        self.last_attempts = attempts
        last = attempts[-1]
        raise ShareConnectionError(
            str(self.share_path),
            last.code,
            last.description,
            attempts
        )

    def disconnect(self) -> None:
        """Release the link. Safe to call any number of times; never raises."""
        if not self.is_connected:
            return

        if self._owns_session:
            try:
                self.backend.disconnect(self.share_path, force=True)
            except Exception as e:
                self.logger.warning(
                    "Failed to cancel share connection",
                    share=str(self.share_path),
                    error=str(e)
                )

        self._state = ConnectionState.DISCONNECTED
        self._owns_session = False
        self.logger.info("Disconnected from network share", share=str(self.share_path))

    def try_direct_access(self) -> bool:
        """Check whether the share can be listed without any connection step."""
        try:
            entries = self.backend.list_entries(self.share_path)
        except Exception as e:
            self.logger.info(
                "Direct access failed",
                share=str(self.share_path),
                error=str(e)
            )
            return False

        self.logger.info(
            "Direct access succeeded",
            share=str(self.share_path),
            files=sum(1 for entry in entries if not entry.is_dir)
        )
        return True

    def require_connected(self) -> None:
        """Fail fast when the share is not connected.

        Raises:
            ShareStateError: If the connection state is Disconnected
        """
        if not self.is_connected:
            raise ShareStateError(f"Not connected to network share {self.share_path}")

    def _cancel_existing(self) -> None:
        """Best-effort teardown of any connection to this share, ours or a stale one."""
        try:
            self.backend.disconnect(self.share_path, force=True)
        except Exception as e:
            self.logger.debug(
                "No existing connection cancelled",
                share=str(self.share_path),
                error=str(e)
            )
        self._state = ConnectionState.DISCONNECTED
        self._owns_session = False

    def describe(self) -> Dict[str, Any]:
        """Get information about this connection."""
        return {
            "share": str(self.share_path),
            "state": self._state.value,
            "principal": self.credentials.principal,
            "credentials": self.credentials.label,
            "backend": self.backend.describe()
        }

    def __enter__(self) -> "ShareConnection":
        """Enter the connection scope."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect when leaving the scope, whatever happened inside it."""
        self.disconnect()
