from __future__ import annotations

import argparse
import contextlib
import pathlib
import sys
from typing import List, Optional

from .errors import BFRuntimeError, BFSyntaxError, format_runtime_error
from .loader import load
from .machine import Machine
from .streams import BinaryStreamInput, BinaryStreamOutput


def _binary(stream):
    return getattr(stream, "buffer", stream)


def _read_source(args: argparse.Namespace, parser: argparse.ArgumentParser) -> str:
    if args.inline is not None:
        return args.inline
    if args.script:
        return pathlib.Path(args.script).read_text(encoding="utf-8", errors="replace")
    parser.error("expected source file path or --execute")
    return ""


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="haifa-bf", description="Run Brainfuck programs on the tape machine")
    parser.add_argument("script", nargs="?", help="Path to Brainfuck source file")
    parser.add_argument("-e", "--execute", dest="inline", help="Execute Brainfuck code string")
    parser.add_argument("-i", "--input", dest="input_path", help="Read program input from file instead of stdin")
    parser.add_argument("--trace", action="store_true", help="Write an execution trace to stderr")
    parser.add_argument("--max-steps", type=int, help="Stop after executing this many instructions")
    parser.add_argument(
        "--visualize",
        nargs="?",
        const="gui",
        choices=["gui", "curses"],
        help="Visualize machine execution (optional mode: gui or curses); program input comes from --input only",
    )
    parser.add_argument("--debug", action="store_true", help="Print stack traces when loading or execution fails")
    args = parser.parse_args(argv)

    if args.inline is not None and args.script:
        parser.error("cannot use script path and --execute together")
        return 1
    if args.max_steps is not None and args.max_steps < 0:
        parser.error("--max-steps must not be negative")
        return 1

    try:
        source = _read_source(args, parser)
        program = load(source)

        if args.visualize:
            input_data = pathlib.Path(args.input_path).read_bytes() if args.input_path else b""
            return _visualize(program, input_data, args.visualize, args.max_steps)

        with contextlib.ExitStack() as stack:
            if args.input_path:
                input_stream = stack.enter_context(open(args.input_path, "rb"))
            else:
                input_stream = _binary(sys.stdin)
            output = BinaryStreamOutput(_binary(sys.stdout))
            machine = Machine(program, BinaryStreamInput(input_stream), output)
            trace = sys.stderr if args.trace else None
            try:
                if args.max_steps is None:
                    machine.run(trace=trace)
                else:
                    _run_bounded(machine, args.max_steps, trace)
            finally:
                output.flush()
            if not machine.is_terminated():
                print(f"stopped after {machine.step_count} steps (pc={machine.pc})", file=sys.stderr)
                return 1
        return 0
    except BFSyntaxError as exc:
        if args.debug:
            import traceback

            traceback.print_exc()
        print(f"load failed: {exc}", file=sys.stderr)
        return 1
    except BFRuntimeError as exc:
        if args.debug:
            import traceback

            traceback.print_exc()
        print(f"execution failure: {format_runtime_error(exc)}", file=sys.stderr)
        return 1
    except OSError as exc:
        if args.debug:
            import traceback

            traceback.print_exc()
        print(str(exc), file=sys.stderr)
        return 1


def _run_bounded(machine: Machine, max_steps: int, trace) -> None:
    while not machine.is_terminated() and machine.step_count < max_steps:
        if trace is not None:
            print(machine.trace_entry().format(), file=trace)
        machine.step()


def _visualize(program, input_data: bytes, selected_mode: str, max_steps: Optional[int]) -> int:
    visualizer_cls = None
    gui_exc: Exception | None = None
    if selected_mode == "gui":
        try:
            from .visualizer import MachineVisualizer as visualizer_cls
        except Exception as e:  # pragma: no cover - pygame missing/unavailable
            gui_exc = e
            selected_mode = "curses"

    if selected_mode == "curses":
        try:
            from .visualizer_headless import MachineVisualizer as visualizer_cls
        except Exception as headless_exc:  # pragma: no cover
            if gui_exc is not None:
                print(
                    "Visualizer unavailable. GUI error: "
                    f"{gui_exc}; Headless error: {headless_exc}",
                    file=sys.stderr,
                )
            else:
                print(f"Visualizer unavailable: {headless_exc}", file=sys.stderr)
            return 1

    assert visualizer_cls is not None
    visualizer = visualizer_cls(program, input_data, max_steps=max_steps)
    visualizer.run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
