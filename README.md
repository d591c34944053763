# essay-ecs

A small entity-component-system (ECS) library. Entities hold components.
Entities with the same set of component types share a table. Views walk every
table that holds the components you ask for.

## Install

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Entities and views

Any Python object can be a component. Its class is the component type.

```python
from dataclasses import dataclass

from essay_ecs.store import EntityStore
from essay_ecs.view import Mut


@dataclass
class Position:
    x: int


@dataclass
class Velocity:
    dx: int


store = EntityStore()
a = store.spawn(Position(1))
store.spawn((Position(2), Velocity(5)))

for pos in store.iter_view(Position):
    print(pos)

for pos, vel in store.iter_view((Mut(Position), Velocity)):
    pos.x += vel.dx

store.extend(a, Velocity(1))   # the entity moves to another table
store.despawn(a)               # its slot is freed and used again later
print(store.get(a, Position))  # None
```

A bundle passed to `spawn`, `spawn_id` or `extend` is a single component
value or a tuple (possibly nested) of them.

A view spec can be:

- a component type, for read access
- `Mut(Type)`, for write access
- `EntityId` (from `essay_ecs.store`), for the entity's id
- a tuple of these, which yields tuples

`EntityStore.view_plan` builds a view once. `EntityStore.iter_view_with_plan`
runs it as often as you like. `spawn_empty` creates an entity with no
components. `despawn` raises `KeyError` for an unknown, stale or already
despawned id.

The building blocks underneath are available too: `essay_ecs.meta`
(`StoreMeta`, the registry of columns, tables and views), `essay_ecs.column`
(`Column` and the generational `RowId`), `essay_ecs.table` (`Table`,
`TableRow`) and `essay_ecs.bundle` (`InsertBuilder`, `InsertPlan`,
`InsertCursor`).

## Resources

`essay_ecs.resource.Resources` keeps one value for each type:

```python
from essay_ecs.resource import Resources

resources = Resources()
resources.insert(Position(3))
resources.get(Position)       # Position(x=3)
resources.remove(Position)    # Position(x=3); it is now gone
resources.get(Position)       # None
```

`contains_resource` stays true for a type once it has been inserted, even
after it is removed. `get_resource_id` raises `KeyError` for a type that was
never inserted.

## Events

`essay_ecs.event.Events` is double-buffered.

- `send` adds an event to the current buffer.
- `update` makes the current events the previous ones and drops the older
  ones. After two updates an event is gone.

Each reader keeps its own `EventCursor`. `InEvent` pairs a cursor with the
events and yields every event the reader has not seen yet, once. `OutEvent`
sends events.

```python
from essay_ecs.event import EventCursor, Events, InEvent, OutEvent

events = Events()
cursor = EventCursor()
OutEvent(events).send("hello")
list(InEvent(events, cursor))   # ["hello"]
list(InEvent(events, cursor))   # []
```

## Plugins

Subclass `essay_ecs.plugin.Plugin` and implement `build(app)`. `name()`
defaults to the plugin's fully qualified type name; `is_unique()` defaults to
true; `finish` and `cleanup` do nothing by default.

`essay_ecs.plugin.Plugins` keeps a record of plugins:

- `add_name` records a plugin's name and raises `ValueError` when a unique
  plugin's name is already recorded.
- `push` adds the plugin; `contains_plugin` and `get_plugin` look it up by type.
- `finish` and `cleanup` call the matching hook on each plugin, in the order
  the plugins were pushed.

## Errors

`essay_ecs.error.EcsError` is an exception carrying a message and an optional
source error. `EcsError.other` wraps another error, `EcsError.other_loc` also
appends a location, `rethrow` returns a copy with extra text appended, and
`message()` gives the text. The store and its parts raise the built-in
`KeyError` and `ValueError` for bad ids and misuse.

## What this package does not do

There is no application object, scheduler, system runner or main loop here.
`Plugin.build`, `finish` and `cleanup` take an app argument, but the package
does not supply one: you pass your own object. Nothing is saved to disk; all
state lives in memory.