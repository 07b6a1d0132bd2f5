"""Bidirectional name <-> id index for sessions and models."""

from __future__ import annotations


class NameIndex:
    """Keeps ``name -> id`` and ``id -> name`` in lockstep.

    Not synchronised on its own; the owning table's lock guards it.
    """

    def __init__(self) -> None:
        self._ids_by_name: dict[str, str] = {}
        self._names_by_id: dict[str, str] = {}

    def bind(self, name: str, item_id: str) -> None:
        """Associate *name* with *item_id*, dropping stale pairs for either side."""
        self.unbind_id(item_id)
        self.unbind_name(name)
        self._ids_by_name[name] = item_id
        self._names_by_id[item_id] = name

    def unbind_id(self, item_id: str) -> str | None:
        name = self._names_by_id.pop(item_id, None)
        if name is not None:
            self._ids_by_name.pop(name, None)
        return name

    def unbind_name(self, name: str) -> str | None:
        item_id = self._ids_by_name.pop(name, None)
        if item_id is not None:
            self._names_by_id.pop(item_id, None)
        return item_id

    def rename(self, item_id: str, new_name: str) -> None:
        self.bind(new_name, item_id)

    def id_for(self, name: str) -> str | None:
        return self._ids_by_name.get(name)

    def name_for(self, item_id: str) -> str | None:
        return self._names_by_id.get(item_id)

    def has_name(self, name: str) -> bool:
        return name in self._ids_by_name

    def names(self) -> list[str]:
        return sorted(self._ids_by_name)

    def name_to_id(self) -> dict[str, str]:
        return dict(self._ids_by_name)

    def id_to_name(self) -> dict[str, str]:
        return dict(self._names_by_id)

    def clear(self) -> None:
        self._ids_by_name.clear()
        self._names_by_id.clear()

    def __len__(self) -> int:
        return len(self._ids_by_name)
