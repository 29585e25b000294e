from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .instructions import Instruction


@dataclass(frozen=True)
class TraceEntry:
    """One executed step, as recorded by visualizers and ``run(trace=...)``."""

    step: int
    pc: int
    instruction: Instruction
    tape_pointer: int
    cell: int

    def format(self) -> str:
        return (
            f"[STEP={self.step} PC={self.pc}] EXEC: {self.instruction.name} "
            f"PTR={self.tape_pointer} CELL={self.cell}"
        )

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "pc": self.pc,
            "instruction": self.instruction.symbol,
            "tape_pointer": self.tape_pointer,
            "cell": self.cell,
        }


@dataclass
class MachineSnapshot:
    pc: int
    tape_pointer: int
    tape: bytes
    step_count: int
    instruction: Optional[Instruction]
    terminated: bool

    def tape_window(self, radius: int = 8) -> tuple:
        """Return ``(start, cells)`` centred on the tape pointer."""
        start = max(0, self.tape_pointer - radius)
        end = min(len(self.tape), self.tape_pointer + radius + 1)
        return start, list(self.tape[start:end])


__all__ = ["TraceEntry", "MachineSnapshot"]
