"""Tables of entity rows, each row pointing at one row in every column of the table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .column import RowId
from .meta import ColumnId, TableId, TableMeta


@dataclass
class TableRow:
    """An entity's row in a table: its own id and its row in each column."""

    entity_id: Any
    row_id: RowId
    columns: list[RowId] = field(default_factory=list)

    def is_alloc(self) -> bool:
        return self.row_id.is_alloc()


class Table:
    """The rows of all entities sharing one set of columns."""

    def __init__(self, table_id: TableId, meta: TableMeta) -> None:
        self.id = table_id
        self.meta = meta
        self._rows: list[TableRow] = []
        self._free_list: list[RowId] = []

    def __len__(self) -> int:
        return len(self._rows)

    def position(self, column_id: ColumnId) -> int | None:
        return self.meta.position(column_id)

    def get(self, row_id: RowId) -> TableRow | None:
        """Return the row if the id is current, None if it is stale."""
        row = self._rows[row_id.index]
        return row if row.row_id == row_id else None

    def get_by_index(self, index: int) -> TableRow | None:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def push(self, entity_id: Any, columns) -> RowId:
        """Add a row, reusing the most recently freed slot if there is one."""
        columns = list(columns)
        if self._free_list:
            row_id = self._free_list.pop().allocate()
            self._rows[row_id.index] = TableRow(entity_id, row_id, columns)
            return row_id

        row_id = RowId.new(len(self._rows))
        self._rows.append(TableRow(entity_id, row_id, columns))
        return row_id

    def remove(self, row_id: RowId) -> None:
        """Free the row if the id is current; stale ids are ignored."""
        row = self._rows[row_id.index]
        if row.row_id == row_id:
            row.row_id = row_id.next_free()
            self._free_list.append(row.row_id)