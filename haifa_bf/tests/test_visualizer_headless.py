import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from haifa_bf.loader import load
from haifa_bf.visualizer_headless import MachineVisualizer


def advance_until_halted(visualizer, limit=1000):
    for _ in range(limit):
        if visualizer.state.halted:
            break
        visualizer._advance(auto=False)


def test_advance_runs_program_to_completion():
    visualizer = MachineVisualizer(load(",+."), b"A")
    advance_until_halted(visualizer)
    assert visualizer.state.halted
    assert visualizer.state.error is None
    assert visualizer.state.output.getvalue() == b"B"
    assert [entry.pc for entry in visualizer.state.trace] == [0, 1, 2]
    assert visualizer.message.startswith("Halted")


def test_runtime_error_halts_with_message():
    visualizer = MachineVisualizer(load("+<"))
    advance_until_halted(visualizer)
    assert visualizer.state.halted
    assert "cannot seek over leftmost of tape" in visualizer.state.error
    assert visualizer.message.startswith("Error:")


def test_max_steps_pauses_auto_run():
    visualizer = MachineVisualizer(load("+[]"), max_steps=5)
    visualizer.auto_run = True
    for _ in range(10):
        visualizer._advance(auto=True)
    assert visualizer.state.machine.step_count == 5
    assert not visualizer.auto_run
    assert not visualizer.state.halted
    assert "max steps" in visualizer.message


def test_reset_builds_fresh_machine_with_same_input():
    visualizer = MachineVisualizer(load(",."), b"x")
    advance_until_halted(visualizer)
    first_machine = visualizer.state.machine
    visualizer._reset()
    assert visualizer.state.machine is not first_machine
    assert not visualizer.state.halted
    advance_until_halted(visualizer)
    assert visualizer.state.output.getvalue() == b"x"


def test_trace_is_bounded():
    visualizer = MachineVisualizer(load("+" * 300))
    advance_until_halted(visualizer)
    assert len(visualizer.state.trace) == MachineVisualizer.TRACE_LIMIT
    assert visualizer.state.trace[-1].pc == 299


def test_instruction_lines_mark_pc_and_partners():
    visualizer = MachineVisualizer(load("+[-]"))
    visualizer._advance(auto=False)
    lines = visualizer._instruction_lines(10)
    assert lines[0] == " 000 INCREMENT +"
    assert lines[1] == "→001 LOOP_START [ -> 003"
    assert lines[3] == " 003 LOOP_END ] -> 001"


def test_tape_line_highlights_pointer():
    visualizer = MachineVisualizer(load(">+"))
    advance_until_halted(visualizer)
    assert visualizer._tape_line() == "@00000  000 [001]"


def test_empty_program_starts_halted():
    visualizer = MachineVisualizer(load("comment only"))
    assert visualizer.state.halted
    assert visualizer._instruction_lines(5) == ["<no instructions>"]
