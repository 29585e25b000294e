from __future__ import annotations

from typing import List, Tuple

from .errors import LoopNotEnded, LoopNotStarted
from .instructions import SYMBOLS, Instruction, JumpTable, Program


class BFLoader:
    """Lowers source text into a :class:`Program`.

    Any character outside the eight-symbol alphabet is a comment. Loop
    brackets are paired with a stack of pending ``[`` positions, so the
    positions stored in the jump table are instruction indices, not source
    offsets.
    """

    def __init__(self, source: str):
        self.source = source
        self.line = 1
        self.column = 1

    def load(self) -> Program:
        instructions: List[Instruction] = []
        jump_table = JumpTable()
        # (instruction index, line, column) of every unclosed [
        loop_stack: List[Tuple[int, int, int]] = []

        for ch in self.source:
            inst = Instruction.from_symbol(ch)
            if inst is Instruction.LOOP_START:
                loop_stack.append((len(instructions), self.line, self.column))
            elif inst is Instruction.LOOP_END:
                ending = len(instructions)
                if not loop_stack:
                    raise LoopNotStarted(self.line, self.column)
                beginning, _, _ = loop_stack.pop()
                jump_table.link(beginning, ending)
            if inst is not None:
                instructions.append(inst)
            self._advance(ch)

        if loop_stack:
            _, line, column = loop_stack[-1]
            raise LoopNotEnded(line, column)
        return Program(tuple(instructions), jump_table)

    def _advance(self, ch: str) -> None:
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1


def load(source: str) -> Program:
    return BFLoader(source).load()


def count_instructions(source: str) -> int:
    return sum(1 for ch in source if ch in SYMBOLS)


__all__ = ["BFLoader", "load", "count_instructions"]
