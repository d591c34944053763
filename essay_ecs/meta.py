"""Type metadata for the entity store: columns, tables, views and view tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass(frozen=True, order=True)
class ColumnId:
    """Identifies one component column."""

    index: int


@dataclass(frozen=True, order=True)
class TableId:
    """Identifies one table, a distinct set of columns."""

    index: int

    UNSET: ClassVar[TableId]


TableId.UNSET = TableId(2**64 - 1)


@dataclass(frozen=True, order=True)
class ViewId:
    """Identifies one view, an ordered list of columns."""

    index: int


@dataclass(frozen=True, order=True)
class ViewTableId:
    """Identifies the pairing of a view with a table that satisfies it."""

    index: int


def _type_name(component_type: type) -> str:
    return f"{component_type.__module__}.{component_type.__qualname__}"


@dataclass
class ColumnType:
    """Metadata for one component type stored as a column."""

    id: ColumnId
    component_type: type
    name: str
    tables: list[TableId] = field(default_factory=list)
    views: list[ViewId] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"ColumnType(id={self.id!r}, name={self.name!r})"


@dataclass(frozen=True)
class TableMeta:
    """A table's identity and its sorted, distinct column ids."""

    id: TableId
    columns: tuple[ColumnId, ...]

    def find_column(self, column_id: ColumnId) -> ColumnId | None:
        """Return the column id if the table holds it, else None."""
        return column_id if column_id in self.columns else None

    def position(self, column_id: ColumnId) -> int | None:
        """Return the index of the column within the table, or None."""
        try:
            return self.columns.index(column_id)
        except ValueError:
            return None

    def contains_columns(self, columns) -> bool:
        """True if every given column is part of this table."""
        return all(col in self.columns for col in columns)


@dataclass
class ViewType:
    """A view's identity, its ordered columns and the view tables matching it."""

    id: ViewId
    columns: tuple[ColumnId, ...]
    view_tables: list[ViewTableId] = field(default_factory=list)

    def column_position(self, column_id: ColumnId) -> int | None:
        """Return the index of the column within the view, or None."""
        try:
            return self.columns.index(column_id)
        except ValueError:
            return None


@dataclass(frozen=True)
class ViewTableType:
    """Maps each view column to its position in a matching table."""

    id: ViewTableId
    view_id: ViewId
    table_id: TableId
    index_map: tuple[int, ...]

    @classmethod
    def create(
        cls, view_table_id: ViewTableId, table: TableMeta, view: ViewType
    ) -> ViewTableType:
        """Build the view table for a view over a table holding all its columns."""
        index_map = []
        for col in view.columns:
            index = table.position(col)
            if index is None:
                raise ValueError(f"table {table.id} lacks view column {col}")
            index_map.append(index)
        return cls(view_table_id, view.id, table.id, tuple(index_map))


class StoreMeta:
    """Registry of columns, tables, views and the links between them."""

    def __init__(self) -> None:
        self._column_map: dict[type, ColumnId] = {}
        self._columns: list[ColumnType] = []

        self._table_map: dict[tuple[ColumnId, ...], TableId] = {}
        self._tables: list[TableMeta] = []

        self._view_map: dict[tuple[ColumnId, ...], ViewId] = {}
        self._views: list[ViewType] = []

        self._view_table_map: dict[tuple[ViewId, TableId], ViewTableId] = {}
        self._view_tables: list[ViewTableType] = []

    # columns

    def column(self, column_id: ColumnId) -> ColumnType:
        return self._columns[column_id.index]

    def get_column(self, component_type: type) -> ColumnId | None:
        return self._column_map.get(component_type)

    def add_column(self, component_type: type) -> ColumnId:
        """Register a component type, returning its existing id if known."""
        existing = self._column_map.get(component_type)
        if existing is not None:
            return existing

        column_id = ColumnId(len(self._columns))
        self._column_map[component_type] = column_id
        self._columns.append(
            ColumnType(column_id, component_type, _type_name(component_type))
        )
        return column_id

    # tables

    def table(self, table_id: TableId) -> TableMeta:
        return self._tables[table_id.index]

    def add_table(self, columns) -> TableId:
        """Register the table for a set of columns (sorted, duplicates removed)."""
        key = tuple(sorted(set(columns)))

        existing = self._table_map.get(key)
        if existing is not None:
            return existing

        table_id = TableId(len(self._tables))
        self._table_map[key] = table_id
        self._tables.append(TableMeta(table_id, key))

        for column_id in key:
            self.column(column_id).tables.append(table_id)

        table = self.table(table_id)
        matching = [v.id for v in self._views if table.contains_columns(v.columns)]
        for view_id in matching:
            self.add_view_table(table_id, view_id)

        return table_id

    # views

    def view(self, view_id: ViewId) -> ViewType:
        return self._views[view_id.index]

    def get_view(self, columns) -> ViewId | None:
        return self._view_map.get(tuple(columns))

    def add_view(self, columns) -> ViewId:
        """Register a view over the given ordered columns."""
        key = tuple(columns)

        existing = self._view_map.get(key)
        if existing is not None:
            return existing

        view_id = ViewId(len(self._views))
        self._view_map[key] = view_id
        self._views.append(ViewType(view_id, key))

        for col in key:
            self.column(col).views.append(view_id)

        matching = [t.id for t in self._tables if t.contains_columns(key)]
        for table_id in matching:
            self.add_view_table(table_id, view_id)

        return view_id

    # view tables

    def view_table(self, view_table_id: ViewTableId) -> ViewTableType:
        return self._view_tables[view_table_id.index]

    def add_view_table(self, table_id: TableId, view_id: ViewId) -> ViewTableId:
        """Link a view to a table that satisfies it."""
        existing = self._view_table_map.get((view_id, table_id))
        if existing is not None:
            return existing

        view_table_id = ViewTableId(len(self._view_tables))
        self._view_table_map[(view_id, table_id)] = view_table_id

        view = self.view(view_id)
        self._view_tables.append(
            ViewTableType.create(view_table_id, self.table(table_id), view)
        )
        view.view_tables.append(view_table_id)

        return view_table_id