"""Application configuration."""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings."""

    # Application
    log_level: str = "INFO"

    # UI
    app_name: str = "Backup Space Check"
    app_version: str = "1.0.0"

    # Space policy
    safety_buffer_bytes: int = 100_000_000
    low_free_threshold_percent: float = 10.0

    # Probing
    network_filesystem_types: List[str] = [
        "nfs",
        "nfs4",
        "smbfs",
        "smb3",
        "afpfs",
        "webdav",
        "davfs",
        "fuse.davfs",
        "cifs",
    ]
    probe_max_workers: int = 4

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
