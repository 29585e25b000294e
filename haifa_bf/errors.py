from __future__ import annotations

from typing import Optional


class BFSyntaxError(SyntaxError):
    """Raised by the loader when brackets do not pair up."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{line}:{column}: {message}")
        self.line = line
        self.column = column


class LoopNotStarted(BFSyntaxError):
    def __init__(self, line: int, column: int):
        super().__init__("syntax error: ending loop `]` has no matching `[`", line, column)


class LoopNotEnded(BFSyntaxError):
    def __init__(self, line: int, column: int):
        super().__init__("syntax error: starting loop `[` is never closed", line, column)


class BFRuntimeError(RuntimeError):
    """Runtime error raised by the machine with the failing step's position attached."""

    def __init__(self, message: str, pc: int, tape_pointer: int):
        super().__init__(message)
        self.pc = pc
        self.tape_pointer = tape_pointer


class SeekOverLeftmost(BFRuntimeError):
    def __init__(self, pc: int, tape_pointer: int):
        super().__init__("cannot seek over leftmost of tape", pc, tape_pointer)


class LackOfInput(BFRuntimeError):
    def __init__(self, pc: int, tape_pointer: int):
        super().__init__("lack of input", pc, tape_pointer)


class ReadError(BFRuntimeError):
    def __init__(self, pc: int, tape_pointer: int, cause: Optional[BaseException] = None):
        super().__init__(f"input read error: {cause}", pc, tape_pointer)
        self.cause = cause


class WriteError(BFRuntimeError):
    def __init__(self, pc: int, tape_pointer: int, cause: Optional[BaseException] = None):
        super().__init__(f"output write error: {cause}", pc, tape_pointer)
        self.cause = cause


def format_runtime_error(error: BFRuntimeError) -> str:
    return f"{error} (pc={error.pc}, tape={error.tape_pointer})"


__all__ = [
    "BFSyntaxError",
    "LoopNotStarted",
    "LoopNotEnded",
    "BFRuntimeError",
    "SeekOverLeftmost",
    "LackOfInput",
    "ReadError",
    "WriteError",
    "format_runtime_error",
]
