from __future__ import annotations

import asyncio
from datetime import timezone
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .autosave import AutoSaver, ErrorHook
from .interfaces import DataOwner
from .paths import StorageLocation
from .settings import Settings, get_settings
from .store import DocumentStore, Lookup, initialize


class AsyncDocumentStore:
    """
    Async wrapper around DocumentStore.
    Uses asyncio.to_thread for load/save to avoid blocking the event loop on file I/O;
    in-memory operations run inline.
    """

    def __init__(self, store: DocumentStore, *, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings
        self.autosave: AutoSaver | None = None

    @classmethod
    async def initialize(
        cls,
        owner: DataOwner,
        database: str,
        location: StorageLocation | str,
        auto_save: bool = False,
        *,
        settings: Settings | None = None,
        on_autosave_error: ErrorHook | None = None,
    ) -> "AsyncDocumentStore":
        settings = settings or get_settings()
        # The initial load happens in the constructor, so build it off the loop too.
        store = await asyncio.to_thread(initialize, owner, database, location, False, settings=settings)
        wrapper = cls(store, settings=settings)
        if auto_save:
            wrapper.start_autosave(on_error=on_autosave_error)
        return wrapper

    @property
    def store(self) -> DocumentStore:
        return self._store

    async def get(self, key: str, shape: Any = Any) -> Lookup[Any]:
        return self._store.get(key, shape)

    async def set(self, key: str, value: Any) -> None:
        self._store.set(key, value)

    async def exists(self, key: str) -> bool:
        return self._store.exists(key)

    async def delete(self, key: str) -> None:
        self._store.delete(key)

    async def clear(self) -> None:
        self._store.clear()

    async def load(self) -> None:
        await asyncio.to_thread(self._store.load)

    async def save(self) -> None:
        await asyncio.to_thread(self._store.save)

    # ------------------------------------------------------------------
    # autosave
    # ------------------------------------------------------------------
    @property
    def autosave_running(self) -> bool:
        return self.autosave is not None and self.autosave.running

    @property
    def autosave_failed(self) -> bool:
        return self.autosave is not None and self.autosave.failed

    @property
    def last_autosave_error(self) -> BaseException | None:
        return self.autosave.last_error if self.autosave is not None else None

    def start_autosave(
        self,
        interval: float | None = None,
        *,
        on_error: ErrorHook | None = None,
    ) -> AutoSaver:
        """
        Schedule autosave on the running event loop. Must be called from a coroutine.
        """
        if self.autosave is not None and self.autosave.running:
            return self.autosave
        if interval is None:
            interval = (self._settings or get_settings()).autosave_interval
        scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop(), timezone=timezone.utc)
        self.autosave = AutoSaver(
            self.save,
            interval,
            on_error=on_error,
            name=f"autosave-{self._store.database}",
            scheduler=scheduler,
        ).start()
        return self.autosave

    async def stop_autosave(self) -> None:
        if self.autosave is not None:
            self.autosave.stop()
            # AsyncIOScheduler.shutdown is queued onto the loop; let it run.
            await asyncio.sleep(0)
