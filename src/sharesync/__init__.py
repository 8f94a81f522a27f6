"""Network share synchronizer: connect to SMB shares and pull the newest files."""

__version__ = "1.0.0"
