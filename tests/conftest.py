from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from backup_space.config import settings
from backup_space.main import app
from backup_space.schemas import CapacityInfo


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Pin policy settings so environment overrides don't leak into tests."""
    monkeypatch.setattr(settings, "safety_buffer_bytes", 100_000_000)
    monkeypatch.setattr(settings, "low_free_threshold_percent", 10.0)
    monkeypatch.setattr(settings, "probe_max_workers", 4)


@pytest.fixture(scope="function")
def client():
    """FastAPI TestClient for the space check API."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def capacity_factory():
    """Factory fixture to create CapacityInfo objects."""
    def _create(
        path="/Volumes/Backup",
        total=1_000_000_000_000,
        free=500_000_000_000,
        available=None,
        source="volume_resources",
    ):
        return CapacityInfo(
            path=path,
            source=source,
            total_bytes=total,
            free_bytes=free,
            available_bytes=free if available is None else available,
        )
    return _create


@pytest.fixture
def mount_table(monkeypatch):
    """Replace psutil's partition list with the given (mountpoint, fstype) pairs."""
    import psutil

    def _install(*entries):
        partitions = [
            SimpleNamespace(device=f"dev{i}", mountpoint=mp, fstype=fstype, opts="")
            for i, (mp, fstype) in enumerate(entries)
        ]
        monkeypatch.setattr(psutil, "disk_partitions", lambda all=False: partitions)
        return partitions
    return _install
