from dataclasses import dataclass

from essay_ecs.column import Column
from essay_ecs.meta import StoreMeta
from essay_ecs.table import Table
from essay_ecs.view import Mut, ViewBuilder, ViewIterator, build_view


@dataclass
class TestA:
    value: int


@dataclass
class TestB:
    value: int


class MiniStore:
    """Just enough of an entity store to drive views."""

    def __init__(self):
        self.meta = StoreMeta()
        self.columns = []
        self.tables = []
        self.entities = {}
        self.add_table([])

    def add_column(self, component_type):
        column_id = self.meta.add_column(component_type)
        if column_id.index == len(self.columns):
            self.columns.append(Column(self.meta, component_type))
        return column_id

    def add_table(self, columns):
        table_id = self.meta.add_table(columns)
        if table_id.index == len(self.tables):
            self.tables.append(Table(table_id, self.meta.table(table_id)))
        return table_id

    def spawn(self, entity_id, *values):
        column_ids = [self.add_column(type(v)) for v in values]
        table_id = self.add_table(column_ids)
        table = self.meta.table(table_id)
        rows = [None] * len(values)
        for column_id, value in zip(column_ids, values):
            rows[table.position(column_id)] = self.columns[column_id.index].push(value)
        row = self.tables[table_id.index].push(entity_id, rows)
        self.entities[entity_id] = (table_id, row)

    def despawn(self, entity_id):
        table_id, row = self.entities.pop(entity_id)
        self.tables[table_id.index].remove(row)

    def get_by_id(self, column_id, row_id):
        return self.columns[column_id.index].get(row_id)

    def get_row_by_type_index(self, table_id, index):
        return self.tables[table_id.index].get_by_index(index)


def view(store, spec):
    builder = ViewBuilder(store)
    build_view(builder, spec)
    return ViewIterator(store, builder.build(), spec)


def test_view_single_component():
    store = MiniStore()
    store.spawn(0, TestA(1))
    assert list(view(store, TestA)) == [TestA(1)]

    store.spawn(1, TestB(10000))
    assert list(view(store, TestB)) == [TestB(10000)]
    assert list(view(store, TestA)) == [TestA(1)]

    store.spawn(2, TestB(100))
    assert list(view(store, TestA)) == [TestA(1)]
    assert list(view(store, TestB)) == [TestB(10000), TestB(100)]


def test_view_mut_changes_components():
    store = MiniStore()
    store.spawn(0, TestB(10000))
    store.spawn(1, TestB(100))

    for item in view(store, Mut(TestB)):
        item.value += 1

    assert list(view(store, TestB)) == [TestB(10001), TestB(101)]


def test_view_tuple():
    store = MiniStore()
    store.spawn(0, TestA(1), TestB(2))
    store.spawn(1, TestB(3), TestA(4))

    assert list(view(store, TestA)) == [TestA(1), TestA(4)]
    assert list(view(store, TestB)) == [TestB(2), TestB(3)]
    assert list(view(store, (TestA, TestB))) == [
        (TestA(1), TestB(2)),
        (TestA(4), TestB(3)),
    ]


def test_view_tuple_order_follows_spec():
    store = MiniStore()
    store.spawn(0, TestA(1), TestB(2))

    assert list(view(store, (TestB, TestA))) == [(TestB(2), TestA(1))]


def test_view_spans_tables():
    store = MiniStore()
    store.spawn(0, TestA(1))
    store.spawn(1, TestA(2), TestB(3))

    assert sorted(a.value for a in view(store, TestA)) == [1, 2]
    assert list(view(store, (TestA, TestB))) == [(TestA(2), TestB(3))]


def test_view_skips_removed_rows():
    store = MiniStore()
    store.spawn(0, TestA(1))
    store.spawn(1, TestA(2))
    store.spawn(2, TestA(3))

    store.despawn(0)

    assert list(view(store, TestA)) == [TestA(2), TestA(3)]


def test_view_empty_store():
    store = MiniStore()
    assert list(view(store, TestA)) == []


def test_view_registered_before_table():
    store = MiniStore()
    iterator = view(store, TestA)
    store.spawn(0, TestA(5))

    assert list(iterator) == [TestA(5)]


def test_builder_records_access_kinds():
    store = MiniStore()
    builder = ViewBuilder(store)
    build_view(builder, (TestA, Mut(TestB)))
    plan = builder.build()

    a_col = store.meta.get_column(TestA)
    b_col = store.meta.get_column(TestB)
    assert plan.components == frozenset({a_col})
    assert plan.mut_components == frozenset({b_col})
    assert plan.view == store.meta.get_view([a_col, b_col])


def test_builder_reuses_view():
    store = MiniStore()
    first = ViewBuilder(store)
    first.add_ref(TestA)
    second = ViewBuilder(store)
    second.add_mut(TestA)

    assert first.build().view == second.build().view


def test_cursor_reads_row_directly():
    store = MiniStore()
    store.spawn(7, TestA(1), TestB(2))

    builder = ViewBuilder(store)
    builder.add_ref(TestB)
    plan = builder.build()

    meta = store.meta
    view_table = meta.view_table(meta.view(plan.view).view_tables[0])
    table = meta.table(view_table.table_id)
    row = store.get_row_by_type_index(view_table.table_id, 0)

    cursor = plan.new_cursor(store, table, view_table, row)
    assert cursor.deref(TestB) == TestB(2)
    assert cursor.entity_id() == 7