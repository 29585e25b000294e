import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from haifa_bf.errors import LackOfInput
from haifa_bf.loader import load
from haifa_bf.machine import Machine
from haifa_bf.runtime import run_file, run_source
from haifa_bf.streams import BytesInput, BytesOutput

ZERO_TERMINATED = [1, 4, 2, 3, 5, 2, 3, 0]

HELLO_WORLD = """++++++++++[>+++++++>++++++++++>+++>++++<
<<<-]>++.>+.+++++++..+++.>>++++.<++.<+++
+++++.--------.+++.------.--------.>+."""

SUM_N = ",[[->>+>+<<<]>>>[-<<<+>>>]<[-<+>]<<-]>."


def test_echo():
    assert run_source(",[.,]", ZERO_TERMINATED) == bytes([1, 4, 2, 3, 5, 2, 3])


def test_reverse():
    assert run_source(">,[>,]<[.<]", ZERO_TERMINATED) == bytes([3, 2, 5, 3, 2, 4, 1])


def test_hello_world():
    assert run_source(HELLO_WORLD) == b"Hello, world!"


def test_sum_n():
    assert run_source(SUM_N, b"\x03") == b"\x06"


@pytest.mark.parametrize("n, expected", [(0, 0), (1, 1), (4, 10), (10, 55)])
def test_sum_n_triangular_numbers(n, expected):
    assert run_source(SUM_N, bytes([n])) == bytes([expected])


def test_echo_without_sentinel_runs_out_of_input():
    with pytest.raises(LackOfInput):
        run_source(",[.,]", b"abc")


@pytest.mark.parametrize(
    "source, data",
    [
        (",[.,]", ZERO_TERMINATED),
        (">,[>,]<[.<]", ZERO_TERMINATED),
        (HELLO_WORLD, b""),
        (SUM_N, b"\x05"),
    ],
)
def test_stepping_matches_run(source, data):
    program = load(source)

    run_output = BytesOutput()
    ran = Machine(program, BytesInput(bytes(data)), run_output)
    ran.run()

    step_output = BytesOutput()
    stepped = Machine(program, BytesInput(bytes(data)), step_output)
    while not stepped.is_terminated():
        stepped.step()

    assert step_output.getvalue() == run_output.getvalue()
    assert stepped.tape == ran.tape
    assert stepped.tape_pointer == ran.tape_pointer
    assert stepped.step_count == ran.step_count


def test_run_file(tmp_path):
    script = tmp_path / "hello.b"
    script.write_text(HELLO_WORLD, encoding="utf-8")
    assert run_file(str(script)) == b"Hello, world!"


def test_bundled_benchmark_scripts_load():
    scripts = sorted((ROOT / "benchmark" / "scripts").glob("*.b"))
    assert scripts
    for script in scripts:
        load(script.read_text(encoding="utf-8"))


def test_bundled_reverse_script_output():
    scripts_dir = ROOT / "benchmark" / "scripts"
    data = (scripts_dir / "reverse.in").read_bytes()
    output = run_file(str(scripts_dir / "reverse.b"), data)
    assert output == data[:-1][::-1]


def test_run_file_tolerates_non_utf8_comments(tmp_path):
    script = tmp_path / "latin1.b"
    script.write_bytes(b"\xff\xfe comment ++.")
    assert run_file(str(script)) == b"\x02"
