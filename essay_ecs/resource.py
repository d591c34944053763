"""Singleton resources stored by type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, order=True)
class ResourceId:
    """Identifies the slot a resource type occupies."""

    index: int


def _type_name(resource_type: type) -> str:
    return f"{resource_type.__module__}.{resource_type.__qualname__}"


class Resources:
    """At most one value per type. A type's slot stays reserved once it has been used."""

    def __init__(self) -> None:
        self._resource_map: dict[type, ResourceId] = {}
        self._resources: list[Any] = []
        self._present: list[bool] = []

    def insert(self, value: Any) -> None:
        """Store the value under its type, replacing any earlier value of that type."""
        resource_type = type(value)
        resource_id = self._resource_map.get(resource_type)

        if resource_id is None:
            resource_id = ResourceId(len(self._resources))
            self._resource_map[resource_type] = resource_id
            self._resources.append(value)
            self._present.append(True)
        else:
            self._resources[resource_id.index] = value
            self._present[resource_id.index] = True

    def get_resource_id(self, resource_type: type) -> ResourceId:
        """Return the id of a known resource type; KeyError if it was never inserted."""
        try:
            return self._resource_map[resource_type]
        except KeyError:
            raise KeyError(f"{_type_name(resource_type)!r} is an unknown resource") from None

    def get(self, resource_type: type) -> Any:
        """Return the stored value of the type, or None if there is none."""
        resource_id = self._resource_map.get(resource_type)
        if resource_id is None or not self._present[resource_id.index]:
            return None
        return self._resources[resource_id.index]

    def contains_resource(self, resource_type: type) -> bool:
        """True if the type has ever been inserted, even if since removed."""
        return resource_type in self._resource_map

    def remove(self, resource_type: type) -> Any:
        """Take the stored value out and return it, or None if there is none."""
        resource_id = self._resource_map.get(resource_type)
        if resource_id is None or not self._present[resource_id.index]:
            return None
        value = self._resources[resource_id.index]
        self._resources[resource_id.index] = None
        self._present[resource_id.index] = False
        return value