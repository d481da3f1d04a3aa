from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from .files import FileStorageEngine, create_files_router
from .settings.api import create_settings_router, resolve_storage_root
from .settings.store import SettingsStore


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def create_app(*, data_dir: Optional[Path] = None) -> FastAPI:
    repo_root = _repo_root()
    data_dir = Path(data_dir or os.environ.get("TFS_DATA_DIR") or (repo_root / "data"))
    config_path = data_dir / "config.json"

    store = SettingsStore(path=config_path)
    settings = store.load()

    # Relative storage roots live next to the data directory
    base_dir = data_dir.parent
    storage_root = resolve_storage_root(settings.storage_root, base_dir=base_dir)
    engine = FileStorageEngine.local(storage_root, cache_max_age=settings.cache_max_age)

    app = FastAPI(title="tenant-file-storage")
    app.include_router(
        create_files_router(engine=engine, archive_limits=lambda: store.load().get_archive_limits())
    )
    app.include_router(
        create_settings_router(store=store, engine=engine, active_root=storage_root, base_dir=base_dir)
    )

    app.state.settings_store = store
    app.state.engine = engine
    app.state.repo_root = repo_root
    app.state.storage_root = storage_root
    return app


app = create_app()
