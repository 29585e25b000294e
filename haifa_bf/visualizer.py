import datetime
import json
from typing import List, Optional, Set

import pygame

from .errors import BFRuntimeError, format_runtime_error
from .instructions import Program
from .machine import Machine
from .machine_events import TraceEntry
from .streams import BytesInput, BytesOutput

# Constants
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 760
BACKGROUND_COLOR = (240, 240, 240)
FONT_COLOR = (10, 10, 10)
PC_COLOR = (200, 255, 200)
PARTNER_COLOR = (255, 240, 170)
CHANGE_COLOR = (255, 220, 200)
ERROR_COLOR = (200, 40, 40)
FONT_SIZE = 18
LINE_HEIGHT = 22
MARGIN = 20
CELL_WIDTH = 56
TAPE_RADIUS = 10


class MachineVisualizer:
    def __init__(self, program: Program, input_data: bytes = b"", max_steps: Optional[int] = None):
        self.program = program
        self.input_data = bytes(input_data)
        self.max_steps = max_steps
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Brainfuck Machine Visualizer")
        self.font = pygame.font.SysFont("monospace", FONT_SIZE)
        self.clock = pygame.time.Clock()
        self.running = True
        self.paused = True
        self.steps_per_frame = 1
        self.message = "Press P to run, SPACE to step, +/- to change speed, L to export trace."
        self.trace_log: List[TraceEntry] = []
        self.error: Optional[str] = None
        self.prev_tape = b""
        self._new_machine()

    def _new_machine(self) -> None:
        self.output = BytesOutput()
        self.machine = Machine(self.program, BytesInput(self.input_data), self.output)

    def _draw_text(self, text: str, x: int, y: int, color=FONT_COLOR, background=None):
        surface = self.font.render(text, True, color, background)
        self.screen.blit(surface, (x, y))

    def _draw_section(
        self,
        title: str,
        data: List[str],
        x: int,
        y: int,
        width: int,
        height: int,
        highlight_index: int = -1,
        secondary_highlights: Set[int] | None = None,
    ) -> None:
        pygame.draw.rect(self.screen, (220, 220, 220), (x, y, width, height), border_radius=5)
        pygame.draw.rect(self.screen, (180, 180, 180), (x, y, width, 30), border_radius=5)
        self._draw_text(title, x + 10, y + 5, color=(50, 50, 50))

        start_y = y + 40
        for i, line in enumerate(data):
            line_y = start_y + i * LINE_HEIGHT
            if line_y > y + height - LINE_HEIGHT:
                self._draw_text("...", x + 10, line_y)
                break

            bg = None
            if i == highlight_index:
                bg = PC_COLOR
            elif secondary_highlights and i in secondary_highlights:
                bg = PARTNER_COLOR
            self._draw_text(line, x + 10, line_y, background=bg)

    def _prepare_instruction_display(self, rows: int):
        instructions = self.program.instructions
        pc = self.machine.pc
        start = max(0, min(pc, len(instructions)) - rows // 2)
        end = min(len(instructions), start + rows)
        lines = []
        partner_rows: Set[int] = set()
        partner = self.program.jump_table.get(pc)
        for row, idx in enumerate(range(start, end)):
            lines.append(f"{idx:04d}: {instructions[idx]}")
            if idx == partner:
                partner_rows.add(row)
        highlight = pc - start if start <= pc < end else -1
        return lines, highlight, partner_rows

    def _draw_tape(self, x: int, y: int) -> None:
        snapshot = self.machine.snapshot_state()
        start, cells = snapshot.tape_window(TAPE_RADIUS)
        for offset, value in enumerate(cells):
            index = start + offset
            rect = (x + offset * CELL_WIDTH, y, CELL_WIDTH - 4, 48)
            if index == snapshot.tape_pointer:
                color = PC_COLOR
            elif index >= len(self.prev_tape) or self.prev_tape[index] != value:
                color = CHANGE_COLOR
            else:
                color = (225, 225, 225)
            pygame.draw.rect(self.screen, color, rect, border_radius=4)
            self._draw_text(f"{value:3d}", rect[0] + 8, y + 4)
            self._draw_text(f"{index}", rect[0] + 8, y + 26, color=(110, 110, 110))

    def _draw_ui(self):
        self.screen.fill(BACKGROUND_COLOR)
        column_width = (SCREEN_WIDTH - 3 * MARGIN) // 2
        panel_height = SCREEN_HEIGHT - 200

        instructions_data, highlight_idx, partner_rows = self._prepare_instruction_display(
            (panel_height - 50) // LINE_HEIGHT
        )
        self._draw_section(
            "Instructions",
            instructions_data,
            MARGIN,
            MARGIN,
            column_width,
            panel_height,
            highlight_index=highlight_idx,
            secondary_highlights=partner_rows,
        )

        right_x = 2 * MARGIN + column_width
        machine = self.machine
        status = [
            f"step: {machine.step_count}",
            f"pc: {machine.pc} / {len(self.program.instructions)}",
            f"tape pointer: {machine.tape_pointer}",
            f"tape length: {len(machine.tape)}",
            f"speed: {self.steps_per_frame} steps/frame",
        ]
        self._draw_section("Machine", status, right_x, MARGIN, column_width, 170)

        output = self.output.getvalue()
        output_text = output.decode("latin-1", errors="replace").splitlines() or ["<empty>"]
        self._draw_section("Output", output_text[-8:], right_x, MARGIN + 190, column_width, 220)

        trace_lines = [entry.format() for entry in self.trace_log[-8:]]
        self._draw_section("Trace", trace_lines, right_x, MARGIN + 430, column_width, panel_height - 430)

        self._draw_tape(MARGIN, panel_height + 2 * MARGIN)

        msg_y = SCREEN_HEIGHT - MARGIN - LINE_HEIGHT
        if self.error:
            self._draw_text(self.error, MARGIN, msg_y - LINE_HEIGHT, color=ERROR_COLOR)
        self._draw_text(self.message, MARGIN, msg_y, color=(100, 100, 100))

        pygame.display.flip()
        self.prev_tape = bytes(machine.tape)

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = True
                    self._step_once()
                elif event.key == pygame.K_p:
                    self.paused = not self.paused
                    self.message = "Running..." if not self.paused else "Paused."
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self.steps_per_frame = min(self.steps_per_frame * 2, 4096)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    self.steps_per_frame = max(self.steps_per_frame // 2, 1)
                elif event.key == pygame.K_l:
                    self._export_trace()
                elif event.key == pygame.K_r:
                    self._reset_machine()

    def run(self):
        while self.running:
            self._handle_events()

            if not self.paused:
                for _ in range(self.steps_per_frame):
                    if self._step_once():
                        self.paused = True
                        break

            self._draw_ui()
            self.clock.tick(30)

        pygame.quit()

    def _step_once(self) -> bool:
        """Advance one instruction; returns True once execution cannot continue."""
        if self.machine.is_terminated():
            self.message = "Program already complete."
            return True
        if self.error is not None:
            return True
        if self.max_steps is not None and self.machine.step_count >= self.max_steps:
            self.message = "Reached max steps; press R to reset."
            return True

        entry = self.machine.trace_entry()
        try:
            self.machine.step()
        except BFRuntimeError as exc:
            self.error = format_runtime_error(exc)
            self.message = "Execution failed."
            return True
        self.trace_log.append(entry)

        if self.machine.is_terminated():
            self.message = "Execution halted."
            return True
        return False

    def _export_trace(self) -> None:
        if not self.trace_log:
            self.message = "Trace log is empty; nothing exported."
            return
        timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"bf_trace_{timestamp}.jsonl"
        try:
            with open(filename, "w", encoding="utf-8") as f:
                for entry in self.trace_log:
                    f.write(json.dumps(entry.to_dict()))
                    f.write("\n")
            self.message = f"Trace exported to {filename}"
        except OSError as exc:
            self.message = f"Failed to export trace: {exc}"

    def _reset_machine(self) -> None:
        self._new_machine()
        self.paused = True
        self.error = None
        self.prev_tape = b""
        self.trace_log.clear()
        self.message = "Machine reset."
