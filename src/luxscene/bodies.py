"""
Export bodies - anything that can be written out as one file.

Every body implements a single operation, :meth:`Body.as_bytes`. The
exporters never look at the concrete representation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


class Body(ABC):
    """A file payload that can be materialized to bytes."""

    @abstractmethod
    def as_bytes(self) -> bytes:
        raise NotImplementedError


class TextBody(Body):
    """UTF-8 encoded text, used for compiled scene files."""

    def __init__(self, text: str):
        self.text = text

    def as_bytes(self) -> bytes:
        return self.text.encode("utf-8")

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"TextBody({len(self.text)} chars)"


class BytesBody(Body):
    def __init__(self, data: bytes):
        self.data = bytes(data)

    def as_bytes(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"BytesBody({len(self.data)} bytes)"


class DeferredBody(Body):
    """Body produced on first use by ``producer``; the result is cached."""

    def __init__(self, producer: Callable[[], Union[bytes, str]]):
        self._producer = producer
        self._data: Optional[bytes] = None

    def as_bytes(self) -> bytes:
        if self._data is None:
            result = self._producer()
            self._data = result.encode("utf-8") if isinstance(result, str) else bytes(result)
        return self._data


@dataclass
class ExportEntry:
    """One entry of an export mapping: a destination path and its body.

    Either field may be None; exporters skip such entries.
    """

    path: Optional[str]
    body: Optional[Body]

    @property
    def exportable(self) -> bool:
        return bool(self.path) and self.body is not None


def to_body(value: Union[Body, bytes, str, Callable[[], Union[bytes, str]], None]) -> Optional[Body]:
    """Wrap a raw payload (text, bytes or producer) in the matching :class:`Body`."""
    if value is None or isinstance(value, Body):
        return value
    if isinstance(value, str):
        return TextBody(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesBody(bytes(value))
    if callable(value):
        return DeferredBody(value)
    raise TypeError(f"Cannot export a body of type {type(value).__name__}")


def to_entry(value: Any) -> ExportEntry:
    """Accept an :class:`ExportEntry` or a ``{"path": ..., "body": ...}`` mapping."""
    if isinstance(value, ExportEntry):
        return value
    return ExportEntry(path=value.get("path"), body=to_body(value.get("body")))
