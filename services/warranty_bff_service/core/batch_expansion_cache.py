"""Lazily loaded, memoized code lists keyed by batch (or shop) id.

At most one fetch per key is in flight: concurrent callers await the same
task. Invalidating a key (after a bulk action) or resetting the whole cache
(navigation, logout) makes any still-running fetch stale, and stale results are
dropped instead of being stored.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from services.libs.warranty_service_libs.error_handling import WarrantyServiceError
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.dto.backend_v1 import Code

logger = create_service_logger("warranty_bff.batch_expansion_cache")

CodeLoader = Callable[[str], Awaitable[list[Code]]]


def _retrieve_exception(task: asyncio.Task[list[Code]]) -> None:
    # Failures are recorded per key; mark them retrieved so orphaned tasks stay quiet
    if not task.cancelled():
        task.exception()


class BatchExpansionCache:
    def __init__(self, loader: CodeLoader, *, name: str = "batch") -> None:
        self._loader = loader
        self._name = name
        self._entries: dict[str, list[Code]] = {}
        self._errors: dict[str, WarrantyServiceError] = {}
        self._inflight: dict[str, asyncio.Task[list[Code]]] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0

    def get(self, key: str) -> list[Code] | None:
        return self._entries.get(key)

    def error_for(self, key: str) -> WarrantyServiceError | None:
        return self._errors.get(key)

    def is_loading(self, key: str) -> bool:
        return key in self._inflight

    @property
    def loaded_keys(self) -> list[str]:
        return list(self._entries)

    @property
    def known_keys(self) -> list[str]:
        """Keys with stored codes, a recorded error or a fetch in flight."""
        return list(dict.fromkeys([*self._entries, *self._errors, *self._inflight]))

    def all_code_ids(self) -> set[str]:
        return {
            code.code_id
            for codes in self._entries.values()
            for code in codes
            if code.code_id is not None
        }

    async def ensure_loaded(self, key: str) -> list[Code]:
        """Return the cached codes for ``key``, fetching them once if needed.

        Raises:
            WarrantyServiceError: If the fetch failed; the failure is also kept
                in ``error_for(key)`` until the next successful load.
        """
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(
                self._fetch(key, self._generations.get(key, 0), self._epoch)
            )
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        else:
            logger.debug("Joining in-flight fetch", cache=self._name, key=key)

        # Shield so one caller giving up does not cancel the fetch for the others
        return await asyncio.shield(task)

    def _is_current(self, key: str, generation: int, epoch: int) -> bool:
        return epoch == self._epoch and generation == self._generations.get(key, 0)

    async def _fetch(self, key: str, generation: int, epoch: int) -> list[Code]:
        try:
            codes = list(await self._loader(key))
        except WarrantyServiceError as error:
            if self._is_current(key, generation, epoch):
                self._errors[key] = error
                logger.warning(
                    "Failed to load codes",
                    cache=self._name,
                    key=key,
                    error_code=error.error_code,
                )
            raise
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]

        if self._is_current(key, generation, epoch):
            self._entries[key] = codes
            self._errors.pop(key, None)
            logger.debug("Loaded codes", cache=self._name, key=key, count=len(codes))
        else:
            logger.debug("Discarding stale fetch result", cache=self._name, key=key)
        return codes

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)
        self._errors.pop(key, None)
        self._inflight.pop(key, None)
        self._generations[key] = self._generations.get(key, 0) + 1

    def invalidate_all(self) -> None:
        """Forget everything; fetches still running will not be applied."""
        self._entries.clear()
        self._errors.clear()
        self._inflight.clear()
        self._epoch += 1

    async def reload(
        self, keys: Iterable[str]
    ) -> dict[str, list[Code] | WarrantyServiceError]:
        """Invalidate and refetch ``keys`` concurrently; one failure never blocks the rest."""
        keys = list(dict.fromkeys(keys))
        for key in keys:
            self.invalidate(key)

        results = await asyncio.gather(
            *(self.ensure_loaded(key) for key in keys), return_exceptions=True
        )

        outcome: dict[str, list[Code] | WarrantyServiceError] = {}
        for key, result in zip(keys, results):
            if isinstance(result, BaseException) and not isinstance(result, WarrantyServiceError):
                raise result
            outcome[key] = result
        return outcome
