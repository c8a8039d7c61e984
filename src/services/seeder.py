from __future__ import annotations

import asyncio
import logging
import string
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Sequence

from starlette.concurrency import run_in_threadpool

from src.app.domain.models import SeedRun, SeedStatus
from src.app.infra.db.base import RecipeRepository
from src.services.errors import UpstreamError
from src.services.normalizer import normalize_many

log = logging.getLogger("seeder")

LETTERS = tuple(string.ascii_lowercase)
DEFAULT_BATCH_SIZE = 4


class PrefixSource(Protocol):
    async def search_by_prefix(self, letter: str) -> list[dict[str, Any]]: ...


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def batched(letters: Sequence[str], size: int) -> list[tuple[str, ...]]:
    return [tuple(letters[i:i + size]) for i in range(0, len(letters), size)]


class CatalogSeeder:
    """
    Sweeps the provider by every first letter and upserts what it finds.

    Letters are fetched `batch_size` at a time; each batch is awaited as a whole
    before the next one starts. `start()` runs the sweep as a tracked background
    task and `status` reports on the latest run.
    """

    def __init__(
        self,
        provider: PrefixSource,
        store: RecipeRepository,
        batch_size: int = DEFAULT_BATCH_SIZE,
        letters: Sequence[str] = LETTERS,
    ) -> None:
        self._provider = provider
        self._store = store
        self._batch_size = max(1, batch_size)
        self._letters = tuple(letters)
        self._task: Optional[asyncio.Task[SeedRun]] = None
        self._run = SeedRun()

    @property
    def status(self) -> SeedRun:
        return self._run

    def start(self) -> bool:
        """
        Schedule a sweep without waiting for it.

        Returns:
            False if a sweep is already running
        """
        if self._task and not self._task.done():
            return False
        self._run = SeedRun(status=SeedStatus.RUNNING, started_at=_now_utc())
        self._task = asyncio.create_task(self._guarded_sweep(), name="catalog-seeder")
        log.info("seed.started letters=%s batch_size=%s", len(self._letters), self._batch_size)
        return True

    async def wait(self) -> SeedRun:
        if self._task is not None:
            await self._task
        return self._run

    async def seed_all(self) -> SeedRun:
        """Run a sweep in the caller's task and return its result."""
        self._run = SeedRun(status=SeedStatus.RUNNING, started_at=_now_utc())
        return await self._guarded_sweep()

    async def _guarded_sweep(self) -> SeedRun:
        run = self._run
        try:
            for batch in batched(self._letters, self._batch_size):
                await self._seed_batch(batch, run)
        except Exception as exc:
            log.exception("seed.failed")
            run.status = SeedStatus.FAILED
            run.error = str(exc)
        else:
            run.status = SeedStatus.DONE
        finally:
            run.finished_at = _now_utc()
        log.info(
            "seed.finished status=%s fetched=%s failed=%s upserted=%s",
            run.status.value,
            run.letters_fetched,
            run.letters_failed,
            run.recipes_upserted,
        )
        return run

    async def _fetch_letter(self, letter: str) -> Optional[list[dict[str, Any]]]:
        try:
            return await self._provider.search_by_prefix(letter)
        except UpstreamError as exc:
            log.warning("seed.fetch_failed letter=%s error=%s", letter, exc)
            return None

    async def _seed_batch(self, batch: tuple[str, ...], run: SeedRun) -> None:
        results = await asyncio.gather(*(self._fetch_letter(letter) for letter in batch))

        meals: list[dict[str, Any]] = []
        for result in results:
            if result is None:
                run.letters_failed += 1
                continue
            run.letters_fetched += 1
            meals.extend(result)

        recipes = normalize_many(meals)
        if not recipes:
            return

        try:
            written = await run_in_threadpool(self._store.upsert_many, recipes)
        except Exception as exc:
            log.warning("seed.upsert_failed letters=%s error=%s", ",".join(batch), exc)
            return

        run.recipes_upserted += written
        log.info("seed.batch_done letters=%s upserted=%s", ",".join(batch), written)
