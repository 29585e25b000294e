from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Union


class ByteInput(ABC):
    """Sequential byte source consumed one byte per ``,``."""

    @abstractmethod
    def read_byte(self) -> Optional[int]:
        """Return the next byte, or ``None`` once the source is exhausted."""


class ByteOutput(ABC):
    """Sequential byte sink fed one byte per ``.``."""

    @abstractmethod
    def write_byte(self, value: int) -> None:
        ...

    def flush(self) -> None:
        pass


class BytesInput(ByteInput):
    def __init__(self, data: Union[bytes, bytearray, memoryview] = b""):
        self._data = bytes(data)
        self._pos = 0

    def read_byte(self) -> Optional[int]:
        if self._pos >= len(self._data):
            return None
        value = self._data[self._pos]
        self._pos += 1
        return value

    @property
    def remaining(self) -> bytes:
        return self._data[self._pos:]


class BytesOutput(ByteOutput):
    def __init__(self):
        self._buffer = bytearray()

    def write_byte(self, value: int) -> None:
        self._buffer.append(value)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class BinaryStreamInput(ByteInput):
    """Reads from a binary file object such as ``sys.stdin.buffer``.

    ``OSError`` raised by the underlying stream propagates unchanged; the
    machine wraps it in :class:`~haifa_bf.errors.ReadError`.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def read_byte(self) -> Optional[int]:
        chunk = self.stream.read(1)
        if not chunk:
            return None
        return chunk[0]


class BinaryStreamOutput(ByteOutput):
    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write_byte(self, value: int) -> None:
        self.stream.write(bytes((value,)))

    def flush(self) -> None:
        self.stream.flush()


def _binary_stream(stream, action: str):
    # text streams hand out str; only their underlying buffer speaks bytes
    if isinstance(stream, io.TextIOBase):
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            raise TypeError(f"cannot {action} bytes with text stream {type(stream).__name__}")
        return buffer
    return stream


def as_byte_input(source: object) -> ByteInput:
    if source is None:
        return BytesInput()
    if isinstance(source, ByteInput):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return BytesInput(source)
    if isinstance(source, list):
        return BytesInput(bytes(source))
    if hasattr(source, "read"):
        return BinaryStreamInput(_binary_stream(source, "read"))
    raise TypeError(f"cannot read bytes from {type(source).__name__}")


def as_byte_output(sink: object) -> ByteOutput:
    if sink is None:
        return BytesOutput()
    if isinstance(sink, ByteOutput):
        return sink
    if hasattr(sink, "write"):
        return BinaryStreamOutput(_binary_stream(sink, "write"))
    raise TypeError(f"cannot write bytes to {type(sink).__name__}")


__all__ = [
    "ByteInput",
    "ByteOutput",
    "BytesInput",
    "BytesOutput",
    "BinaryStreamInput",
    "BinaryStreamOutput",
    "as_byte_input",
    "as_byte_output",
]
