from __future__ import annotations

from typing import Optional, Sequence, TextIO

from .errors import LackOfInput, ReadError, SeekOverLeftmost, WriteError
from .instructions import Instruction, JumpTable, Program
from .loader import load
from .machine_events import MachineSnapshot, TraceEntry
from .streams import as_byte_input, as_byte_output


class Machine:
    """Tape machine executing a loaded program one instruction at a time.

    The machine owns its tape and both stream endpoints for its whole
    lifetime. It never closes the streams; whoever opened them does.
    """

    def __init__(self, program: Program, input=None, output=None):
        self.instructions: Sequence[Instruction] = program.instructions
        self.jump_table: JumpTable = program.jump_table
        self.program = program
        self.tape = bytearray(1)
        self.tape_pointer = 0
        self.pc = 0
        self.step_count = 0
        self.input = as_byte_input(input)
        self.output = as_byte_output(output)
        self._consumed = False
        self._handlers = {
            Instruction.MOVE_RIGHT: self._op_MOVE_RIGHT,
            Instruction.MOVE_LEFT: self._op_MOVE_LEFT,
            Instruction.INCREMENT: self._op_INCREMENT,
            Instruction.DECREMENT: self._op_DECREMENT,
            Instruction.READ_BYTE: self._op_READ_BYTE,
            Instruction.WRITE_BYTE: self._op_WRITE_BYTE,
            Instruction.LOOP_START: self._op_LOOP_START,
            Instruction.LOOP_END: self._op_LOOP_END,
        }

    @classmethod
    def from_source(cls, source: str, input=None, output=None) -> "Machine":
        return cls(load(source), input, output)

    # -------------------- state inspection --------------------
    def is_terminated(self) -> bool:
        return self.pc >= len(self.instructions)

    def current_cell_value(self) -> int:
        return self.tape[self.tape_pointer]

    def current_instruction(self) -> Instruction:
        return self.instructions[self.pc]

    def snapshot_state(self) -> MachineSnapshot:
        terminated = self.is_terminated()
        return MachineSnapshot(
            pc=self.pc,
            tape_pointer=self.tape_pointer,
            tape=bytes(self.tape),
            step_count=self.step_count,
            instruction=None if terminated else self.current_instruction(),
            terminated=terminated,
        )

    def trace_entry(self) -> TraceEntry:
        return TraceEntry(
            step=self.step_count,
            pc=self.pc,
            instruction=self.current_instruction(),
            tape_pointer=self.tape_pointer,
            cell=self.current_cell_value(),
        )

    # -------------------- execution --------------------
    def step(self) -> None:
        """Executes a single instruction."""
        if self.is_terminated():
            raise RuntimeError("step() called on a terminated machine")
        self._handlers[self.instructions[self.pc]]()
        self.pc += 1
        self.step_count += 1

    def run(self, trace: Optional[TextIO] = None) -> None:
        if self._consumed:
            raise RuntimeError("machine has already been run")
        self._consumed = True
        while not self.is_terminated():
            if trace is not None:
                print(self.trace_entry().format(), file=trace)
            self.step()

    # -------------------- instruction handlers --------------------
    def _op_MOVE_RIGHT(self):
        self.tape_pointer += 1
        if self.tape_pointer >= len(self.tape):
            self.tape.append(0)

    def _op_MOVE_LEFT(self):
        if self.tape_pointer == 0:
            raise SeekOverLeftmost(self.pc, self.tape_pointer)
        self.tape_pointer -= 1

    def _op_INCREMENT(self):
        self.tape[self.tape_pointer] = (self.tape[self.tape_pointer] + 1) % 256

    def _op_DECREMENT(self):
        self.tape[self.tape_pointer] = (self.tape[self.tape_pointer] - 1) % 256

    def _op_READ_BYTE(self):
        try:
            value = self.input.read_byte()
        except OSError as exc:
            raise ReadError(self.pc, self.tape_pointer, exc) from exc
        if value is None:
            raise LackOfInput(self.pc, self.tape_pointer)
        self.tape[self.tape_pointer] = value

    def _op_WRITE_BYTE(self):
        try:
            self.output.write_byte(self.tape[self.tape_pointer])
        except OSError as exc:
            raise WriteError(self.pc, self.tape_pointer, exc) from exc

    # Loop jumps land on the partner; step() then moves one past it.
    def _op_LOOP_START(self):
        if self.tape[self.tape_pointer] == 0:
            self.pc = self.jump_table[self.pc]

    def _op_LOOP_END(self):
        if self.tape[self.tape_pointer] != 0:
            self.pc = self.jump_table[self.pc]


__all__ = ["Machine"]
