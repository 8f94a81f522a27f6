"""Configuration schema for the remote share and local target."""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, SecretStr, field_validator, field_serializer

SUPPORTED_BACKENDS = ("smb", "local", "memory")


class ShareConfig(BaseModel):
    """Remote share address, credentials and local storage location."""

    # Remote share
    remote_ip: str = Field(default="192.168.1.150", description="Remote host name or IP address")
    share_name: str = Field(default="Result", description="Share name on the remote host")

    # Credentials
    username: str = Field(default="", description="Account used to connect")
    password: SecretStr = Field(default=SecretStr(""), description="Password for the account")
    domain: str = Field(default="", description="Optional domain of the account")

    # Local storage
    local_base_path: str = Field(default="./", description="Base directory for copied files")

    # Transport
    backend: str = Field(default="smb", description="Transport backend (smb, local, memory)")
    mount_point: Optional[str] = Field(None, description="Local mount of the share (local backend)")
    port: int = Field(default=445, description="SMB port")
    connection_timeout: int = Field(default=60, description="Connection timeout in seconds")

    model_config = {"populate_by_name": True}

    @field_validator("remote_ip", "share_name")
    @classmethod
    def validate_not_empty(cls, v):
        """Host and share name make up the share path and may not be blank."""
        v = (v or "").strip().strip("\\/")
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v):
        """Backend must be one of the supported transports."""
        if v.lower() not in SUPPORTED_BACKENDS:
            raise ValueError(f"Backend must be one of: {list(SUPPORTED_BACKENDS)}")
        return v.lower()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Port must be a valid TCP port."""
        if not 0 < v < 65536:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_serializer("password", when_used="json")
    def dump_password(self, v: SecretStr) -> str:
        """Persist the real password; the config file is the credential source."""
        return v.get_secret_value()

    @property
    def network_path(self) -> str:
        """UNC path of the share, ``\\\\<remote_ip>\\<share_name>``."""
        return f"\\\\{self.remote_ip}\\{self.share_name}"

    def get_local_base_path(self) -> str:
        """Local base directory, created if it does not exist yet."""
        if not self.local_base_path:
            self.local_base_path = str(Path.cwd())
        Path(self.local_base_path).mkdir(parents=True, exist_ok=True)
        return self.local_base_path


# Example configuration for documentation
SHARE_CONFIG_EXAMPLE = ShareConfig(
    remote_ip="192.168.1.150",
    share_name="Result",
    username="operator",
    domain="",
    local_base_path="./results",
    backend="smb"
)
