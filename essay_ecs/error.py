"""The error type raised by the entity-component system."""

from __future__ import annotations


class EcsError(Exception):
    """An error carrying a message and, optionally, the error that caused it."""

    def __init__(self, msg: str, source: BaseException | None = None) -> None:
        super().__init__(msg)
        self._msg = msg
        self.source = source
        if source is not None:
            self.__cause__ = source

    @staticmethod
    def _as_exception(error) -> BaseException:
        if isinstance(error, BaseException):
            return error
        return Exception(str(error))

    @classmethod
    def other(cls, error) -> EcsError:
        """Wrap another error (or a message), keeping it as the source."""
        source = cls._as_exception(error)
        return cls(str(source), source)

    @classmethod
    def other_loc(cls, error, loc: str) -> EcsError:
        """Wrap another error, appending the location it was raised at."""
        source = cls._as_exception(error)
        return cls(f"{source}\n\tat {loc}", source)

    def rethrow(self, loc: str) -> EcsError:
        """Return a copy of this error with the location text appended."""
        return type(self)(f"{self._msg}{loc}", self.source)

    def message(self) -> str:
        """The error's message."""
        return self._msg

    def __repr__(self) -> str:
        return self._msg