from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class Instruction(Enum):
    MOVE_RIGHT = ">"   # tape pointer += 1, growing the tape on demand
    MOVE_LEFT = "<"    # tape pointer -= 1
    INCREMENT = "+"    # cell = (cell + 1) % 256
    DECREMENT = "-"    # cell = (cell - 1) % 256
    READ_BYTE = ","    # cell = next input byte
    WRITE_BYTE = "."   # emit cell
    LOOP_START = "["   # jump past matching ] when cell == 0
    LOOP_END = "]"     # jump back past matching [ when cell != 0

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, ch: str) -> Optional["Instruction"]:
        return _BY_SYMBOL.get(ch)

    def __str__(self):
        return f"{self.name} {self.value}"


_BY_SYMBOL = {inst.value: inst for inst in Instruction}

SYMBOLS = frozenset(_BY_SYMBOL)


class JumpTable:
    """Bidirectional index of matched loop brackets.

    Backed by a list keyed by instruction position; only LOOP_START and
    LOOP_END positions hold an entry, every other slot is ``None``.
    """

    __slots__ = ("_targets", "_size")

    def __init__(self) -> None:
        self._targets: List[Optional[int]] = []
        self._size = 0

    def link(self, beginning: int, ending: int) -> None:
        if len(self._targets) <= ending:
            self._targets.extend([None] * (ending + 1 - len(self._targets)))
        if self._targets[beginning] is None:
            self._size += 1
        if self._targets[ending] is None:
            self._size += 1
        self._targets[beginning] = ending
        self._targets[ending] = beginning

    def __getitem__(self, index: int) -> int:
        if 0 <= index < len(self._targets):
            target = self._targets[index]
            if target is not None:
                return target
        raise KeyError(index)

    def get(self, index: int, default: Optional[int] = None) -> Optional[int]:
        try:
            return self[index]
        except KeyError:
            return default

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.get(index) is not None

    def __len__(self) -> int:
        return self._size

    def pairs(self) -> Iterator[Tuple[int, int]]:
        for index, target in enumerate(self._targets):
            if target is not None and index < target:
                yield index, target

    def __repr__(self) -> str:
        return f"JumpTable({dict(self.pairs())!r})"


@dataclass(frozen=True)
class Program:
    """Loader output: the instruction sequence plus its jump table."""

    instructions: Tuple[Instruction, ...]
    jump_table: JumpTable

    def __iter__(self):
        yield self.instructions
        yield self.jump_table

    def __str__(self):
        return "".join(inst.symbol for inst in self.instructions)


__all__ = ["Instruction", "JumpTable", "Program", "SYMBOLS"]
