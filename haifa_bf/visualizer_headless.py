from __future__ import annotations

import curses
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import BFRuntimeError, format_runtime_error
from .instructions import Program
from .machine import Machine
from .machine_events import TraceEntry
from .streams import BytesInput, BytesOutput


@dataclass
class _MachineState:
    machine: Machine
    output: BytesOutput
    halted: bool = False
    error: Optional[str] = None
    trace: List[TraceEntry] = field(default_factory=list)


def _format_output(data: bytes) -> str:
    return "".join(chr(b) if 32 <= b < 127 else "." for b in data)


class MachineVisualizer:
    """Curses-based headless visualizer for the tape machine.

    Controls:
      - SPACE / p : toggle auto-run
      - n / →     : single-step
      - r         : reset to a fresh machine with the same input
      - q         : quit

    Designed for environments without pygame but with a terminal.
    """

    TRACE_LIMIT = 200

    def __init__(self, program: Program, input_data: bytes = b"", max_steps: Optional[int] = None):
        self.program = program
        self.input_data = bytes(input_data)
        self.max_steps = max_steps
        self.auto_run = False
        self.message = "Press SPACE to run/pause, n to step, q to quit."
        self.state = self._new_state()

    def _new_state(self) -> _MachineState:
        output = BytesOutput()
        machine = Machine(self.program, BytesInput(self.input_data), output)
        return _MachineState(machine=machine, output=output, halted=machine.is_terminated())

    # ---------------------------- public API ----------------------------- #
    def run(self) -> None:  # pragma: no cover - interactive utility
        curses.wrapper(self._main)

    # --------------------------- internal helpers ------------------------ #
    def _main(self, stdscr: "curses._CursesWindow") -> None:  # pragma: no cover
        curses.curs_set(0)
        stdscr.nodelay(False)
        while True:
            self._draw(stdscr)
            stdscr.timeout(30 if (self.auto_run and not self.state.halted) else -1)
            key = stdscr.getch()
            if key == -1:
                if self.auto_run and not self.state.halted:
                    self._advance(auto=True)
                continue

            if key in (ord("q"), ord("Q")):
                break
            if key in (ord(" "), ord("p"), ord("P")):
                if self.state.halted:
                    self.message = "Program halted. Press r to reset or q to quit."
                else:
                    self.auto_run = not self.auto_run
                    self.message = "Running..." if self.auto_run else "Paused."
                continue
            if key in (ord("n"), curses.KEY_RIGHT):
                self._advance(auto=False)
                continue
            if key in (ord("r"), ord("R")):
                self._reset()
                continue
            self.message = f"Unhandled key: {key}."

    def _advance(self, auto: bool) -> None:
        state = self.state
        if state.halted:
            self.auto_run = False
            return
        machine = state.machine
        if self.max_steps is not None and machine.step_count >= self.max_steps:
            self.auto_run = False
            self.message = "Reached max steps; press r to reset or q to quit."
            return

        entry = machine.trace_entry()
        try:
            machine.step()
        except BFRuntimeError as exc:
            state.halted = True
            state.error = format_runtime_error(exc)
            self.auto_run = False
            self.message = f"Error: {state.error}"
            return
        state.trace.append(entry)
        if len(state.trace) > self.TRACE_LIMIT:
            del state.trace[: -self.TRACE_LIMIT]

        if machine.is_terminated():
            state.halted = True
            self.auto_run = False
            self.message = "Halted. Press r to reset or q to quit."
        elif auto:
            self.message = "Running..."

    def _reset(self) -> None:
        self.state = self._new_state()
        self.auto_run = False
        self.message = "Reset. Press SPACE to run or n to step."

    def _instruction_lines(self, height: int) -> List[str]:
        instructions = self.program.instructions
        if not instructions:
            return ["<no instructions>"]
        pc = min(self.state.machine.pc, len(instructions) - 1)
        start = max(0, pc - height // 2)
        end = min(len(instructions), start + height)
        lines = []
        for idx in range(start, end):
            prefix = "→" if idx == self.state.machine.pc else " "
            partner = self.program.jump_table.get(idx)
            suffix = f" -> {partner:03d}" if partner is not None else ""
            lines.append(f"{prefix}{idx:03d} {instructions[idx]}{suffix}")
        return lines

    def _tape_line(self, radius: int = 8) -> str:
        snapshot = self.state.machine.snapshot_state()
        start, cells = snapshot.tape_window(radius)
        parts = []
        for offset, value in enumerate(cells):
            if start + offset == snapshot.tape_pointer:
                parts.append(f"[{value:03d}]")
            else:
                parts.append(f" {value:03d} ")
        return f"@{start:05d} " + "".join(parts)

    def _draw(self, stdscr: "curses._CursesWindow") -> None:  # pragma: no cover
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        self._write(stdscr, 0, 0, "Instructions (SPACE: run/pause, n: step, r: reset, q: quit)")

        row = 2
        for line in self._instruction_lines(min(12, max(1, height - 12))):
            attr = curses.A_REVERSE if line.startswith("→") else curses.A_NORMAL
            self._write(stdscr, row, 0, line, attr)
            row += 1

        machine = self.state.machine
        row += 1
        self._write(
            stdscr,
            row,
            0,
            f"Step: {machine.step_count} | PC: {machine.pc} | PTR: {machine.tape_pointer} "
            f"| Auto: {self.auto_run} | Halted: {self.state.halted}",
        )
        row += 2
        self._write(stdscr, row, 0, "Tape:")
        self._write(stdscr, row + 1, 2, self._tape_line())

        row += 3
        self._write(stdscr, row, 0, "Recent steps:")
        for i, entry in enumerate(self.state.trace[-5:]):
            self._write(stdscr, row + 1 + i, 2, entry.format())

        row += 7
        self._write(stdscr, row, 0, "Output:")
        self._write(stdscr, row + 1, 2, _format_output(self.state.output.getvalue()) or "<empty>")

        self._write(stdscr, height - 2, 0, self.message[: width - 1])
        stdscr.refresh()

    def _write(self, stdscr: "curses._CursesWindow", y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:  # pragma: no cover
        height, width = stdscr.getmaxyx()
        if 0 <= y < height:
            try:
                stdscr.addnstr(y, x, text, max(0, width - x - 1), attr)
            except curses.error:
                pass
