from dataclasses import dataclass

import pytest

from essay_ecs.column import Column, RowId
from essay_ecs.meta import ColumnId, StoreMeta


@dataclass
class TestA:
    value: int


@dataclass
class TestB:
    value: int


def test_col_null():
    col = Column(StoreMeta(), type(None))
    assert len(col) == 1
    assert col.get(RowId.new(0)) is None
    assert col.get(RowId.new(1)) is None
    with pytest.raises(ValueError):
        col.push(None)


def test_col_u8():
    col = Column(StoreMeta(), int)
    assert len(col) == 0
    assert col.get(RowId.new(0)) is None

    assert col.push(1) == RowId.new(0)
    assert len(col) == 1
    assert col.get(RowId.new(0)) == 1
    assert col.get(RowId.new(1)) is None

    assert col.push(2) == RowId.new(1)
    assert len(col) == 2
    assert col.get(RowId.new(0)) == 1
    assert col.get(RowId.new(1)) == 2
    assert col.get(RowId.new(2)) is None


def test_col_u16():
    col = Column(StoreMeta(), TestA)
    assert len(col) == 0
    assert col.get(RowId.new(0)) is None

    assert col.push(TestA(1)) == RowId.new(0)
    assert len(col) == 1
    assert col.get(RowId.new(0)) == TestA(1)
    assert col.get(RowId.new(1)) is None

    assert col.push(TestA(1002)) == RowId.new(1)
    assert len(col) == 2
    assert col.get(RowId.new(0)) == TestA(1)
    assert col.get(RowId.new(1)) == TestA(1002)
    assert col.get(RowId.new(2)) is None


def test_remove_push():
    col = Column(StoreMeta(), TestA)

    id_0 = col.push(TestA(0))
    assert id_0 == RowId.new(0)
    id_1 = col.push(TestA(1))
    assert id_1 == RowId.new(1)
    id_2 = col.push(TestA(2))
    assert id_2 == RowId.new(2)
    id_3 = col.push(TestA(3))
    assert id_3 == RowId.new(3)

    col.remove(id_0)
    col.remove(id_1)

    assert col.get(id_0) is None
    assert col.get(id_1) is None
    assert col.get(id_2) == TestA(2)
    assert col.get(id_3) == TestA(3)

    id_4 = col.push(TestA(4))
    assert id_4 == RowId(1, 1)
    id_5 = col.push(TestA(5))
    assert id_5 == RowId(0, 1)
    id_6 = col.push(TestA(6))
    assert id_6 == RowId(4, 0)

    assert col.get(id_0) is None
    assert col.get(id_1) is None
    assert col.get(id_2) == TestA(2)
    assert col.get(id_3) == TestA(3)
    assert col.get(id_4) == TestA(4)
    assert col.get(id_5) == TestA(5)
    assert col.get(id_6) == TestA(6)


def test_remove_keeps_other_rows():
    col = Column(StoreMeta(), TestA)
    assert col.push(TestA(10)) == RowId.new(0)
    assert col.push(TestA(20)) == RowId.new(1)

    col.remove(RowId.new(0))

    assert col.get(RowId.new(0)) is None
    assert col.get(RowId.new(1)) == TestA(20)


def test_remove_twice_is_ignored():
    col = Column(StoreMeta(), TestA)
    row = col.push(TestA(10))
    col.remove(row)
    col.remove(row)
    assert col.push(TestA(11)) == RowId(0, 1)
    assert col.push(TestA(12)) == RowId.new(1)


def test_remove_free_row_raises():
    col = Column(StoreMeta(), TestA)
    row = col.push(TestA(10))
    with pytest.raises(ValueError):
        col.remove(row.next_free())


def test_replace():
    col = Column(StoreMeta(), TestA)
    assert col.push(TestA(10)) == RowId.new(0)
    assert col.push(TestA(20)) == RowId.new(1)

    assert col.replace(RowId.new(0), TestA(110)) == RowId(0, 1)

    assert col.get(RowId.new(0)) is None
    assert col.get(RowId(0, 1)) == TestA(110)
    assert col.get(RowId.new(1)) == TestA(20)
    assert col.replace(RowId.new(0), TestA(5)) is None


def test_column_ids_follow_registration():
    metas = StoreMeta()
    col_a = Column(metas, TestA)
    col_b = Column(metas, TestB)
    col_a2 = Column(metas, TestA)
    assert col_a.id() == ColumnId(0)
    assert col_b.id() == ColumnId(1)
    assert col_a2.id() == ColumnId(0)


def test_row_id_states():
    row = RowId.new(3)
    assert row.is_alloc()
    freed = row.next_free()
    assert not freed.is_alloc()
    assert freed.index == 3
    again = freed.allocate()
    assert again.is_alloc()
    assert again.index == 3
    assert again != row
    assert not RowId.UNSET.is_alloc()
    with pytest.raises(ValueError):
        freed.next_free()
    with pytest.raises(ValueError):
        row.allocate()