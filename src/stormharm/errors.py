"""Exceptions raised while cleaning storm records."""

from __future__ import annotations


class StormDataError(Exception):
    """Base class for per-record data problems."""


class MalformedRecordError(StormDataError, ValueError):
    """A raw record has a field that cannot be coerced to a valid value.

    ``position`` is the record's index in the input sequence. The projector
    does not know it, so the driver fills it in before reporting.
    """

    def __init__(
        self,
        field: str,
        value: object,
        reason: str,
        position: int | None = None,
    ) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        self.position = position
        super().__init__(self._message())

    def _message(self) -> str:
        where = f"record {self.position}: " if self.position is not None else ""
        return f"{where}{self.field}={self.value!r} {self.reason}"

    # Rebuilt from fields, not the message, when it crosses a process pool
    def __reduce__(self):
        return type(self), (self.field, self.value, self.reason, self.position)

    def at(self, position: int) -> MalformedRecordError:
        """Return a copy of this error tagged with the record position."""
        return MalformedRecordError(self.field, self.value, self.reason, position)


class UnknownExponentCodeError(StormDataError, LookupError):
    """An exponent code has no entry in the damage field's lookup table."""

    def __init__(self, code: str, field: str) -> None:
        self.code = code
        self.field = field
        super().__init__(f"unknown {field} damage exponent code {code!r}")

    def __reduce__(self):
        return type(self), (self.code, self.field)
