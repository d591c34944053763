"""Plugins: reusable units that configure an application when added to it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TypeVar

P = TypeVar("P", bound="Plugin")


def _type_name(plugin_type: type) -> str:
    return f"{plugin_type.__module__}.{plugin_type.__qualname__}"


class Plugin(ABC):
    """Configures an app in build, with optional finish and cleanup steps."""

    @abstractmethod
    def build(self, app: Any) -> None:
        """Add this plugin's systems, resources and the like to the app."""

    def name(self) -> str:
        """The plugin's name; by default its fully qualified type name."""
        return _type_name(type(self))

    def is_unique(self) -> bool:
        """Whether adding a second plugin with the same name is an error."""
        return True

    def finish(self, app: Any) -> None:
        """Called once all plugins are built."""

    def cleanup(self, app: Any) -> None:
        """Called after finish."""


class Plugins:
    """The plugins added to an app, in the order they were added."""

    def __init__(self) -> None:
        self._plugins: list[Plugin] = []
        self._names: set[str] = set()

    def __len__(self) -> int:
        return len(self._plugins)

    def add_name(self, plugin: Plugin) -> None:
        """Record the plugin's name; ValueError if a unique plugin is added twice."""
        name = plugin.name()
        if plugin.is_unique():
            if name in self._names:
                raise ValueError(f"Attempted to add duplicate plugin {name}")
            self._names.add(name)

    def push(self, plugin: Plugin) -> None:
        self._plugins.append(plugin)

    def contains_plugin(self, plugin_type: type) -> bool:
        return _type_name(plugin_type) in self._names

    def get_plugin(self, plugin_type: type[P]) -> P | None:
        """Return the first added plugin of the given type, or None."""
        name = _type_name(plugin_type)
        for plugin in self._plugins:
            if plugin.name() == name:
                return plugin if isinstance(plugin, plugin_type) else None
        return None

    def finish(self, app: Any) -> None:
        for plugin in self._plugins:
            plugin.finish(app)

    def cleanup(self, app: Any) -> None:
        for plugin in self._plugins:
            plugin.cleanup(app)