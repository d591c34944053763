"""A small entity-component-system core: entity storage, views, resources, events and plugins."""

__version__ = "0.1.13"