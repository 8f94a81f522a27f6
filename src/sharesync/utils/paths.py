"""UNC share path handling."""

from dataclasses import dataclass
from typing import Tuple


def normalize_relative_path(relative_path: str) -> str:
    """Normalize a path inside a share to forward slashes with no leading/trailing separators.

    Args:
        relative_path: Path relative to the share root, using either separator

    Returns:
        Normalized relative path, empty string for the share root

    Raises:
        ValueError: If the path tries to climb above the share root
    """
    parts = [p for p in (relative_path or "").replace("\\", "/").split("/") if p and p != "."]
    if ".." in parts:
        raise ValueError(f"Relative path escapes the share root: {relative_path}")
    return "/".join(parts)


@dataclass(frozen=True)
class SharePath:
    """Address of a remote share: host plus share name.

    Always rendered in canonical UNC form, ``\\\\host\\share``.
    """

    host: str
    share: str

    def __post_init__(self):
        """Normalize and validate host and share name."""
        host = (self.host or "").strip().strip("\\/")
        share = (self.share or "").strip().strip("\\/")
        if not host or not share:
            raise ValueError("Share path needs both a host and a share name")
        if "\\" in share or "/" in share:
            raise ValueError(f"Share name must be a single path component: {share}")
        object.__setattr__(self, "host", host)
        object.__setattr__(self, "share", share)

    @classmethod
    def parse(cls, value: str) -> "SharePath":
        """Parse ``\\\\host\\share``, ``//host/share`` or ``host/share`` into a SharePath.

        Any trailing components below the share are rejected; a SharePath always
        addresses the share root.
        """
        host, share, rest = cls.split(value)
        if rest:
            raise ValueError(f"Share path must address the share root, got: {value}")
        return cls(host, share)

    @staticmethod
    def split(value: str) -> Tuple[str, str, str]:
        """Split a UNC-style path into (host, share, remainder)."""
        if not value or not value.strip():
            raise ValueError("Share path must not be empty")
        parts = [p for p in value.strip().replace("/", "\\").split("\\") if p]
        if len(parts) < 2:
            raise ValueError(f"Share path needs a host and a share name: {value}")
        return parts[0], parts[1], "/".join(parts[2:])

    @property
    def unc(self) -> str:
        """Canonical UNC rendering."""
        return f"\\\\{self.host}\\{self.share}"

    def join(self, relative_path: str = "") -> str:
        """Build the full UNC path of an item inside the share."""
        relative = normalize_relative_path(relative_path)
        if not relative:
            return self.unc
        return self.unc + "\\" + relative.replace("/", "\\")

    def relative_to(self, full_path: str) -> str:
        """Return the share-relative part of a full UNC path.

        Raises:
            ValueError: If the path does not belong to this share
        """
        host, share, rest = self.split(full_path)
        if host.lower() != self.host.lower() or share.lower() != self.share.lower():
            raise ValueError(f"{full_path} is not inside {self.unc}")
        return normalize_relative_path(rest)

    def __str__(self) -> str:
        """UNC rendering."""
        return self.unc
