from __future__ import annotations

import pathlib
from typing import Optional, TextIO, Union

from .loader import load
from .machine import Machine
from .streams import BytesOutput

InputData = Union[bytes, bytearray, list, None]


def run_source(source: str, input_data: InputData = b"", *, trace: Optional[TextIO] = None) -> bytes:
    """Load ``source``, run it against ``input_data`` and return everything it wrote."""
    output = BytesOutput()
    machine = Machine(load(source), input_data, output)
    machine.run(trace=trace)
    return output.getvalue()


def run_file(path: str, input_data: InputData = b"", *, trace: Optional[TextIO] = None) -> bytes:
    source = pathlib.Path(path).read_text(encoding="utf-8", errors="replace")
    return run_source(source, input_data, trace=trace)


__all__ = ["run_source", "run_file"]
