"""haifa_bf package exposes the Brainfuck loader and tape machine."""
from .errors import (
    BFRuntimeError,
    BFSyntaxError,
    LackOfInput,
    LoopNotEnded,
    LoopNotStarted,
    ReadError,
    SeekOverLeftmost,
    WriteError,
)
from .instructions import Instruction, JumpTable, Program
from .loader import load
from .machine import Machine
from .runtime import run_file, run_source
from .streams import ByteInput, ByteOutput, BytesInput, BytesOutput

__all__ = [
    "load",
    "Machine",
    "run_source",
    "run_file",
    "Instruction",
    "JumpTable",
    "Program",
    "ByteInput",
    "ByteOutput",
    "BytesInput",
    "BytesOutput",
    "BFSyntaxError",
    "LoopNotStarted",
    "LoopNotEnded",
    "BFRuntimeError",
    "SeekOverLeftmost",
    "LackOfInput",
    "ReadError",
    "WriteError",
]
