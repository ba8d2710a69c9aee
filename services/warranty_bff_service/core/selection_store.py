"""The admin's working set of code identifiers for pending bulk actions."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator


class SelectionStore:
    """Insertion-ordered set of selected code ids spanning any number of batches.

    ``select_batch`` and ``select_all_visible`` toggle as a group: when every
    target is already selected they deselect all targets, otherwise they select
    the union. Repeating either call therefore alternates between two states.
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._ids: dict[str, None] = dict.fromkeys(initial)

    def __contains__(self, code_id: object) -> bool:
        return code_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def snapshot(self) -> list[str]:
        return list(self._ids)

    def toggle(self, code_id: str) -> bool:
        """Flip one id; returns True if it is selected afterwards."""
        if code_id in self._ids:
            del self._ids[code_id]
            return False
        self._ids[code_id] = None
        return True

    def _toggle_group(self, targets: list[str]) -> None:
        if not targets:
            return
        if all(code_id in self._ids for code_id in targets):
            for code_id in targets:
                self._ids.pop(code_id, None)
        else:
            for code_id in targets:
                self._ids.setdefault(code_id, None)

    def select_batch(
        self, batch_ids: Iterable[str], visible_ids: Collection[str] | None = None
    ) -> None:
        """Toggle every code of one batch.

        Args:
            batch_ids: Ids of all codes loaded for the batch
            visible_ids: When given, only batch codes also in this collection
                (the filtered view) are targeted
        """
        targets = [
            code_id
            for code_id in dict.fromkeys(batch_ids)
            if visible_ids is None or code_id in visible_ids
        ]
        self._toggle_group(targets)

    def select_all_visible(self, all_visible_ids: Iterable[str]) -> None:
        """Toggle every code visible under the current filter across expanded batches."""
        self._toggle_group(list(dict.fromkeys(all_visible_ids)))

    def clear(self) -> None:
        self._ids.clear()

    def prune(self, valid_ids: Collection[str]) -> list[str]:
        """Drop ids that no longer exist; returns the removed ids."""
        stale = [code_id for code_id in self._ids if code_id not in valid_ids]
        for code_id in stale:
            del self._ids[code_id]
        return stale
