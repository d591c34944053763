"""Storage for the values of one component type, addressed by generational row ids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from .meta import ColumnId, StoreMeta

_U32 = 0xFFFF_FFFF

# Component types whose values carry no data; their single row exists from the start.
_ZERO_SIZED = (type(None),)


@dataclass(frozen=True, order=True)
class RowId:
    """A row index with a generation; the high generation bit marks a free row."""

    index: int
    gen: int

    FREE_MASK: ClassVar[int] = 0x8000_0000
    UNSET: ClassVar[RowId]

    @classmethod
    def new(cls, index: int) -> RowId:
        return cls(index, 0)

    def is_alloc(self) -> bool:
        return self.gen & self.FREE_MASK == 0

    def next_free(self) -> RowId:
        """The id this row gets once freed: next generation, marked free."""
        if not self.is_alloc():
            raise ValueError(f"{self!r} is already free")
        return RowId(self.index, ((self.gen + 1) | self.FREE_MASK) & _U32)

    def allocate(self) -> RowId:
        """The id a freed row gets when it is reused."""
        if self.is_alloc():
            raise ValueError(f"{self!r} is already allocated")
        return RowId(self.index, self.gen & ~self.FREE_MASK & _U32)


RowId.UNSET = RowId(_U32, RowId.FREE_MASK)


class Column:
    """Values of one component type, reusing freed rows before growing."""

    def __init__(self, metas: StoreMeta, component_type: type) -> None:
        column_id = metas.add_column(component_type)
        self._meta = metas.column(column_id)
        self._zero_sized = component_type in _ZERO_SIZED

        if self._zero_sized:
            self._data: list[Any] = [None]
            self._row_gen: list[int] = [0]
        else:
            self._data = []
            self._row_gen = []

        self._free_list: list[RowId] = []

    def id(self) -> ColumnId:
        return self._meta.id

    def __len__(self) -> int:
        return len(self._data)

    def _is_current(self, row: RowId) -> bool:
        return row.index < len(self._data) and self._row_gen[row.index] == row.gen

    def get(self, row: RowId) -> Any:
        """Return the value at the row, or None if the row id is stale or unknown."""
        if self._is_current(row):
            return self._data[row.index]
        return None

    def push(self, value: Any) -> RowId:
        """Store a value, reusing the most recently freed row if there is one."""
        if self._free_list:
            free_id = self._free_list.pop()
            assert free_id.gen == self._row_gen[free_id.index]
            row = free_id.allocate()
            self._row_gen[row.index] = row.gen
            self._data[row.index] = value
            return row

        if self._zero_sized:
            raise ValueError("zero sized column items can't be pushed")

        index = len(self._data)
        self._data.append(value)
        self._row_gen.append(0)
        return RowId.new(index)

    def remove(self, row: RowId) -> None:
        """Release the row so a later push can reuse it."""
        if not row.is_alloc():
            raise ValueError(f"cannot remove free row {row!r}")

        index = row.index
        if index < len(self._data) and self._row_gen[index] & RowId.FREE_MASK == 0:
            self._row_gen[index] = ((self._row_gen[index] + 1) | RowId.FREE_MASK) & _U32
            self._data[index] = None
            self._free_list.append(row.next_free())

    def replace(self, row: RowId, value: Any) -> RowId | None:
        """Overwrite a current row, bumping its generation; None if the id is stale."""
        if not self._is_current(row):
            return None

        index = row.index
        self._row_gen[index] = (self._row_gen[index] + 1) & ~RowId.FREE_MASK & _U32
        self._data[index] = value
        return RowId(index, self._row_gen[index])

    def __repr__(self) -> str:
        return f"Column(id={self.id()!r}, name={self._meta.name!r}, len={len(self)})"