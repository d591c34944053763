"""The entity store: entities, their component columns and the tables that group them."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, ClassVar

from .bundle import InsertBuilder, InsertPlan, bundle_components
from .column import Column, RowId
from .meta import ColumnId, StoreMeta, TableId
from .table import Table, TableRow
from .view import ViewBuilder, ViewIterator, ViewPlan, build_view

_U32 = 0xFFFF_FFFF


@dataclass(frozen=True, order=True)
class EntityId:
    """An entity index with a generation; the high generation bit marks a free id."""

    index: int
    gen: int

    FREE_MASK: ClassVar[int] = 0x8000_0000

    @classmethod
    def new(cls, index: int) -> EntityId:
        return cls(index, 0)

    def is_alloc(self) -> bool:
        return self.gen & self.FREE_MASK == 0

    def free(self) -> EntityId:
        """The id this entity slot gets once released: next generation, marked free."""
        if not self.is_alloc():
            raise ValueError(f"{self!r} is already free")
        return EntityId(self.index, ((self.gen + 1) | self.FREE_MASK) & _U32)

    def alloc(self) -> EntityId:
        """The id a released slot gets when it is reused."""
        if self.is_alloc():
            raise ValueError(f"{self!r} is already allocated")
        return EntityId(self.index, self.gen & ~self.FREE_MASK & _U32)


@dataclass
class _Entity:
    id: EntityId
    table: TableId
    row: RowId

    @classmethod
    def empty(cls, index: int) -> _Entity:
        return cls(EntityId(index, EntityId.FREE_MASK), TableId.UNSET, RowId.UNSET)

    def is_alloc(self) -> bool:
        return self.table != TableId.UNSET


class _EntityAlloc:
    """Hands out entity ids, reusing released ones first; safe across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._capacity = 0
        self._free_list: list[EntityId] = []

    def alloc(self) -> EntityId:
        with self._lock:
            if self._free_list:
                return self._free_list.pop().alloc()
            index = self._capacity
            self._capacity += 1
            return EntityId.new(index)

    def free(self, entity_id: EntityId) -> None:
        if entity_id.is_alloc():
            raise ValueError(f"{entity_id!r} is still allocated")
        with self._lock:
            self._free_list.append(entity_id)


class EntityStore:
    """Entities grouped into tables by their set of component types."""

    def __init__(self) -> None:
        self.meta = StoreMeta()
        self._columns: list[Column] = []
        self._tables: list[Table] = []
        self._entities: list[_Entity] = []
        self._alloc = _EntityAlloc()

        self.add_table([])

    def __len__(self) -> int:
        return len(self._entities)

    # columns

    def column(self, column_id: ColumnId) -> Column:
        return self._columns[column_id.index]

    def add_column(self, component_type: type) -> ColumnId:
        """Return the column id for a component type, creating its column if new."""
        column_id = self.meta.add_column(component_type)
        if column_id.index < len(self._columns):
            return column_id

        assert column_id.index == len(self._columns)
        self._columns.append(Column(self.meta, component_type))
        return column_id

    # entities

    def _entity(self, entity_id: EntityId) -> _Entity:
        if entity_id.index >= len(self._entities):
            raise KeyError(f"unknown entity {entity_id!r}")
        entity = self._entities[entity_id.index]
        if entity.id != entity_id:
            raise KeyError(f"stale entity {entity_id!r}, current is {entity.id!r}")
        return entity

    def get(self, entity_id: EntityId, component_type: type) -> Any:
        """Return the entity's component of the given type, or None if it has none."""
        column_id = self.meta.get_column(component_type)
        if column_id is None or entity_id.index >= len(self._entities):
            return None

        entity = self._entities[entity_id.index]
        if entity.table == TableId.UNSET:
            return None

        table = self._tables[entity.table.index]
        row = table.get(entity.row)
        if row is None:
            return None

        index = table.position(column_id)
        if index is None:
            return None

        return self.get_by_id(column_id, row.columns[index])

    def alloc_entity_id(self) -> EntityId:
        return self._alloc.alloc()

    def spawn_empty(self) -> EntityId:
        """Create an entity with no components."""
        entity_id = self.alloc_entity_id()
        self.spawn_empty_id(entity_id)
        return entity_id

    def spawn(self, bundle: Any) -> EntityId:
        """Create an entity holding the components of the bundle."""
        plan = self.insert_plan(bundle)
        entity_id = self.alloc_entity_id()
        return self.spawn_with_plan(plan, entity_id, bundle)

    def spawn_id(self, entity_id: EntityId, bundle: Any) -> EntityId:
        """Create an entity under a pre-allocated id."""
        plan = self.insert_plan(bundle)
        return self.spawn_with_plan(plan, entity_id, bundle)

    def insert_plan(self, bundle: Any) -> InsertPlan:
        builder = InsertBuilder(self)
        for value in bundle_components(bundle):
            builder.add_column(type(value))
        return builder.build()

    def spawn_with_plan(
        self, plan: InsertPlan, entity_id: EntityId, bundle: Any
    ) -> EntityId:
        cursor = plan.cursor(self, entity_id)
        for value in bundle_components(bundle):
            cursor.insert(value)
        return cursor.complete()

    def extend(self, entity_id: EntityId, bundle: Any) -> EntityId:
        """Add the bundle's components to an existing entity, moving it to a new table."""
        builder = InsertBuilder(self)
        builder.add_entity(entity_id)
        for value in bundle_components(bundle):
            builder.add_column(type(value))
        plan = builder.build()

        cursor = plan.cursor(self, entity_id)
        for value in bundle_components(bundle):
            cursor.insert(value)
        return cursor.complete()

    def add_table(self, columns) -> TableId:
        """Return the table for a set of columns, creating it if new."""
        table_id = self.meta.add_table(columns)
        if table_id.index < len(self._tables):
            return table_id

        self._tables.append(Table(table_id, self.meta.table(table_id)))
        return table_id

    def insert_or_spawn(
        self, entity_id: EntityId, table_id: TableId, columns
    ) -> EntityId:
        if (
            entity_id.index < len(self._entities)
            and self._entities[entity_id.index].is_alloc()
        ):
            return self.insert(entity_id, table_id, columns)
        return self.push_row(entity_id, table_id, columns)

    def insert(self, entity_id: EntityId, table_id: TableId, columns) -> EntityId:
        """Move a live entity into another table with the given column rows."""
        self._remove_table_row(entity_id)

        row = self._tables[table_id.index].push(entity_id, columns)
        self._entities[entity_id.index] = _Entity(entity_id, table_id, row)
        return entity_id

    def _remove_table_row(self, entity_id: EntityId) -> None:
        entity = self._entity(entity_id)
        self._tables[entity.table.index].remove(entity.row)

    def despawn(self, entity_id: EntityId) -> None:
        """Remove an entity and its components; its id slot becomes reusable."""
        entity = self._entity(entity_id)
        if not entity.is_alloc():
            raise KeyError(f"entity {entity_id!r} is not spawned")

        table = self._tables[entity.table.index]
        row = table.get(entity.row)
        if row is not None:
            for column_id, column_row in zip(table.meta.columns, row.columns):
                self._columns[column_id.index].remove(column_row)
        table.remove(entity.row)

        entity.id = entity_id.free()
        entity.table = TableId.UNSET
        entity.row = RowId.UNSET

        self._alloc.free(entity.id)

    def push_row(self, entity_id: EntityId, table_id: TableId, columns) -> EntityId:
        row = self._tables[table_id.index].push(entity_id, columns)
        self._set_entity(_Entity(entity_id, table_id, row))
        return entity_id

    def spawn_empty_id(self, entity_id: EntityId) -> EntityId:
        table = self._tables[0]
        row = table.push(entity_id, [])
        self._set_entity(_Entity(entity_id, table.id, row))
        return entity_id

    def _set_entity(self, entity: _Entity) -> None:
        entity_id = entity.id
        if not entity_id.is_alloc():
            raise ValueError(f"{entity_id!r} is not allocated")

        if entity_id.index < len(self._entities):
            self._entities[entity_id.index] = entity
        else:
            while len(self._entities) < entity_id.index:
                self._entities.append(_Entity.empty(len(self._entities)))
            self._entities.append(entity)

    # views

    def iter_view(self, spec: Any) -> ViewIterator:
        """Iterate the items of a view spec over every entity that matches it."""
        plan = self.view_plan(spec)
        return self.iter_view_with_plan(plan, spec)

    def view_plan(self, spec: Any) -> ViewPlan:
        builder = ViewBuilder(self)
        build_view(builder, spec)
        return builder.build()

    def iter_view_with_plan(self, plan: ViewPlan, spec: Any) -> ViewIterator:
        return ViewIterator(self, plan, spec)

    # lookups used by insertion and views

    def get_by_id(self, column_id: ColumnId, row_id: RowId) -> Any:
        return self._columns[column_id.index].get(row_id)

    def get_row_by_type_index(self, table_id: TableId, index: int) -> TableRow | None:
        return self._tables[table_id.index].get_by_index(index)

    def entity_column_ids(self, entity_id: EntityId) -> tuple[ColumnId, ...]:
        entity = self._entities[entity_id.index]
        return self._tables[entity.table.index].meta.columns

    def get_table(self, table_id: TableId) -> Table | None:
        if table_id == TableId.UNSET:
            return None
        return self._tables[table_id.index]

    def get_entity_columns(self, entity_id: EntityId) -> list[RowId] | None:
        if not entity_id.is_alloc():
            raise ValueError(f"{entity_id!r} is not allocated")
        entity = self._entities[entity_id.index]

        table = self.get_table(entity.table)
        if table is None:
            return None
        row = table.get(entity.row)
        return None if row is None else row.columns

    def get_entity(self, entity_id: EntityId) -> EntityId | None:
        return entity_id if entity_id.index < len(self._entities) else None