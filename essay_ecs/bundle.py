"""Inserting bundles of components into the entity store.

A bundle is a single component value or a (possibly nested) tuple of them;
each value is stored in the column for its type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .column import RowId
from .meta import ColumnId, TableId


def bundle_components(bundle: Any) -> list[Any]:
    """Flatten a bundle into its component values, in order."""
    if isinstance(bundle, tuple):
        return [value for part in bundle for value in bundle_components(part)]
    return [bundle]


class InsertBuilder:
    """Collects the columns an insertion touches and builds the plan for it."""

    def __init__(self, store: Any) -> None:
        self._store = store
        self._columns: list[ColumnId] = []

    @property
    def columns(self) -> list[ColumnId]:
        return list(self._columns)

    def add_entity(self, entity_id: Any) -> None:
        """Include the columns the entity already has."""
        self._columns.extend(self._store.entity_column_ids(entity_id))

    def add_column(self, component_type: type) -> ColumnId:
        """Include the column for a component type, creating it if needed."""
        column_id = self._store.add_column(component_type)
        self._columns.append(column_id)
        return column_id

    def build(self) -> InsertPlan:
        """Resolve the target table and how insertion order maps onto it."""
        table_id = self._store.add_table(self._columns)
        table = self._store.meta.table(table_id)

        index_map = tuple(self._columns.index(col) for col in table.columns)

        return InsertPlan(table_id, tuple(self._columns), index_map)


@dataclass(frozen=True)
class InsertPlan:
    """The target table, the columns in insertion order, and the table-to-insert mapping."""

    table_id: TableId
    columns: tuple[ColumnId, ...]
    index_map: tuple[int, ...]

    def insert(self, store: Any, index: int, value: Any) -> RowId:
        """Push a value into the column at the given insertion position."""
        return store.column(self.columns[index]).push(value)

    def cursor(self, store: Any, entity_id: Any) -> InsertCursor:
        """Start inserting for an entity, carrying over its existing column rows."""
        cursor = InsertCursor(entity_id, store, self)
        cursor._add_entity(entity_id)
        return cursor


@dataclass
class InsertCursor:
    """Tracks the column rows written while inserting one entity."""

    entity_id: Any
    store: Any
    plan: InsertPlan
    index: int = 0
    rows: list[RowId] = field(default_factory=list)

    def _add_entity(self, entity_id: Any) -> None:
        if self.store.get_entity(entity_id) is None:
            return

        columns = self.store.get_entity_columns(entity_id)
        if columns is not None:
            self.rows.extend(columns)
            self.index += len(columns)

    def insert(self, value: Any) -> None:
        """Store the next component value of the bundle."""
        index = self.index
        self.index += 1
        self.rows.append(self.plan.insert(self.store, index, value))

    def complete(self) -> Any:
        """Place the entity in the plan's table and return its id."""
        columns = [self.rows[index] for index in self.plan.index_map]
        return self.store.insert_or_spawn(self.entity_id, self.plan.table_id, columns)