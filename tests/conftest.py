"""Shared fixtures: an in-memory share populated with timestamped files."""

import os
import sys
from datetime import datetime

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from sharesync.backends import MemoryShareBackend
from sharesync.core import ShareConnection, CredentialSet
from sharesync.utils import SharePath

HOST = "192.168.1.150"
SHARE = "Result"
USERNAME = "operator"
PASSWORD = "pw-123"


def populate_share(backend: MemoryShareBackend) -> MemoryShareBackend:
    """Fill a backend with the files every catalog and copy test expects."""
    backend.add_file(
        "a.csv", b"a-content",
        modified=datetime(2024, 1, 1, 10, 0), created=datetime(2023, 12, 1)
    )
    backend.add_file(
        "b.csv", b"b-content",
        modified=datetime(2024, 1, 3, 10, 0), created=datetime(2023, 11, 1)
    )
    backend.add_file(
        "c.CSV", b"c-content",
        modified=datetime(2024, 1, 2, 10, 0), created=datetime(2023, 12, 15)
    )
    backend.add_file(
        "notes.txt", b"hello share",
        modified=datetime(2024, 1, 4, 10, 0), created=datetime(2024, 1, 4)
    )
    backend.add_file(
        "sub/d.csv", b"d-content",
        modified=datetime(2024, 1, 5, 10, 0), created=datetime(2023, 10, 1)
    )
    backend.add_file(
        "sub/deeper/e.csv", b"e-content",
        modified=datetime(2023, 12, 31, 10, 0), created=datetime(2024, 1, 10)
    )
    return backend


@pytest.fixture
def share_path():
    """The share every test talks to."""
    return SharePath(HOST, SHARE)


@pytest.fixture
def credentials():
    """The account the populated share accepts."""
    return CredentialSet(USERNAME, PASSWORD)


@pytest.fixture
def backend():
    """Populated in-memory share that accepts only the operator account."""
    return populate_share(MemoryShareBackend(accounts={USERNAME: PASSWORD}))


@pytest.fixture
def connection(share_path, credentials, backend):
    """A connected ShareConnection over the populated share."""
    conn = ShareConnection(share_path, credentials, backend)
    conn.connect()
    yield conn
    conn.disconnect()
