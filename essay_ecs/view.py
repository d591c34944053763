"""Views: iterating the components of every entity that holds a given set of types.

A view spec is a component type (read), ``Mut(type)`` (write), the entity id
type, or a (possibly nested) tuple of specs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .meta import ColumnId, TableMeta, ViewId, ViewTableType
from .table import TableRow


@dataclass(frozen=True)
class Mut:
    """Marks a component type as accessed for writing in a view spec."""

    component_type: type


def _is_entity_spec(spec: Any) -> bool:
    from .store import EntityId

    return spec is EntityId


def build_view(builder: ViewBuilder, spec: Any) -> None:
    """Register the columns a view spec reads and writes."""
    if isinstance(spec, tuple):
        for part in spec:
            build_view(builder, part)
    elif isinstance(spec, Mut):
        builder.add_mut(spec.component_type)
    elif _is_entity_spec(spec):
        pass
    else:
        builder.add_ref(spec)


def deref_view(cursor: ViewCursor, spec: Any) -> Any:
    """Produce the item a view spec yields for the cursor's row."""
    if isinstance(spec, tuple):
        return tuple(deref_view(cursor, part) for part in spec)
    if isinstance(spec, Mut):
        return cursor.deref(spec.component_type)
    if _is_entity_spec(spec):
        return cursor.entity_id()
    return cursor.deref(spec)


class ViewBuilder:
    """Collects a view's columns and their access kinds."""

    def __init__(self, store: Any) -> None:
        self._store = store
        self._columns: list[ColumnId] = []
        self._components: set[ColumnId] = set()
        self._mut_components: set[ColumnId] = set()

    def add_ref(self, component_type: type) -> None:
        column_id = self._store.add_column(component_type)
        self._columns.append(column_id)
        self._components.add(column_id)

    def add_mut(self, component_type: type) -> None:
        column_id = self._store.add_column(component_type)
        self._columns.append(column_id)
        self._mut_components.add(column_id)

    def build(self) -> ViewPlan:
        meta = self._store.meta
        view_id = meta.add_view(self._columns)
        view = meta.view(view_id)

        cols = tuple(view.column_position(col) for col in self._columns)

        return ViewPlan(
            view_id,
            cols,
            frozenset(self._components),
            frozenset(self._mut_components),
        )


@dataclass(frozen=True)
class ViewPlan:
    """A registered view plus the read and write column sets it uses."""

    view: ViewId
    cols: tuple[int, ...]
    components: frozenset[ColumnId]
    mut_components: frozenset[ColumnId]

    def new_cursor(
        self,
        store: Any,
        table: TableMeta,
        view_table: ViewTableType,
        row: TableRow,
    ) -> ViewCursor:
        return ViewCursor(store, table, view_table, row, self.cols)


class ViewCursor:
    """Reads the view's components, in order, from one table row."""

    def __init__(
        self,
        store: Any,
        table: TableMeta,
        view_table: ViewTableType,
        row: TableRow,
        cols: tuple[int, ...],
    ) -> None:
        self._store = store
        self._table = table
        self._view_table = view_table
        self._row = row
        self._cols = cols
        self._index = 0

    def deref(self, component_type: type) -> Any:
        """Return the next component of the view for this row."""
        index = self._view_table.index_map[self._cols[self._index]]
        self._index += 1

        column_id = self._table.columns[index]
        row_id = self._row.columns[index]

        return self._store.get_by_id(column_id, row_id)

    def entity_id(self) -> Any:
        return self._row.entity_id


class ViewIterator:
    """Yields the view's item for every live row of every matching table."""

    def __init__(self, store: Any, plan: ViewPlan, spec: Any) -> None:
        self._store = store
        self._plan = plan
        self._spec = spec
        self._view_id = plan.view
        self._view_table_index = 0
        self._row_index = 0

    def __iter__(self) -> ViewIterator:
        return self

    def __next__(self) -> Any:
        meta = self._store.meta
        view = meta.view(self._view_id)

        while self._view_table_index < len(view.view_tables):
            view_table = meta.view_table(view.view_tables[self._view_table_index])
            table_id = view_table.table_id
            table = meta.table(table_id)

            while (
                row := self._store.get_row_by_type_index(table_id, self._row_index)
            ) is not None:
                self._row_index += 1
                if row.is_alloc():
                    cursor = self._plan.new_cursor(self._store, table, view_table, row)
                    return deref_view(cursor, self._spec)

            self._view_table_index += 1
            self._row_index = 0

        raise StopIteration