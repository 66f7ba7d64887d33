"""FastAPI dependencies for settings, replenishment defaults and the snapshot source."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from estoque.core.config import Settings, get_settings
from estoque.domain.replenishment.errors import SnapshotUnavailable
from estoque.domain.replenishment.models import ReplenishmentConfig
from estoque.services.snapshots import FileSnapshotSource, SnapshotSource


@lru_cache(maxsize=4)
def _file_source(
    path: str, defaults: ReplenishmentConfig, window_days: int, config_path: str | None
) -> FileSnapshotSource:
    return FileSnapshotSource(
        path, defaults=defaults, default_window_days=window_days, config_path=config_path
    )


def get_defaults(settings: Annotated[Settings, Depends(get_settings)]) -> ReplenishmentConfig:
    """Global replenishment config."""
    return ReplenishmentConfig.from_settings(settings)


def get_snapshot_source(
    settings: Annotated[Settings, Depends(get_settings)],
    defaults: Annotated[ReplenishmentConfig, Depends(get_defaults)],
) -> SnapshotSource:
    """Snapshot source configured by REPLENISHMENT_SNAPSHOT_PATH.

    Raises:
        SnapshotUnavailable: If no export path is configured.

    """
    if not settings.replenishment_snapshot_path:
        raise SnapshotUnavailable("REPLENISHMENT_SNAPSHOT_PATH is not configured")
    return _file_source(
        settings.replenishment_snapshot_path,
        defaults,
        settings.replenishment_snapshot_window_days,
        settings.replenishment_config_path,
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]
DefaultsDep = Annotated[ReplenishmentConfig, Depends(get_defaults)]
SourceDep = Annotated[SnapshotSource, Depends(get_snapshot_source)]
