import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from haifa_bf.errors import BFSyntaxError, LoopNotEnded, LoopNotStarted
from haifa_bf.instructions import Instruction, JumpTable
from haifa_bf.loader import count_instructions, load


def test_every_symbol_maps_to_one_instruction():
    program = load("><+-,.[]")
    assert program.instructions == (
        Instruction.MOVE_RIGHT,
        Instruction.MOVE_LEFT,
        Instruction.INCREMENT,
        Instruction.DECREMENT,
        Instruction.READ_BYTE,
        Instruction.WRITE_BYTE,
        Instruction.LOOP_START,
        Instruction.LOOP_END,
    )


def test_comments_are_ignored():
    source = "add two: ++ then print it .\n(done)"
    program = load(source)
    assert program.instructions == (
        Instruction.INCREMENT,
        Instruction.INCREMENT,
        Instruction.WRITE_BYTE,
    )
    assert len(program.instructions) == count_instructions(source) == 3


@pytest.mark.parametrize(
    "source",
    [
        "",
        "no code at all",
        ",[.,]",
        ">,[>,]<[.<]",
        "[[[]]][][[]]",
        ",[[->>+>+<<<]>>>[-<<<+>>>]<[-<+>]<<-]>.",
    ],
)
def test_instruction_count_matches_recognized_symbols(source):
    assert len(load(source).instructions) == count_instructions(source)


def test_jump_table_links_nested_pairs_both_ways():
    _, table = load("[[]]")
    assert list(table.pairs()) == [(0, 3), (1, 2)]
    assert table[0] == 3 and table[3] == 0
    assert table[1] == 2 and table[2] == 1
    assert len(table) == 4


def test_jump_table_uses_instruction_positions_not_source_offsets():
    _, table = load("a [ b + c ] d")
    assert table[0] == 2
    assert table[2] == 0


def test_jump_table_entries_are_mutual_inverses():
    program = load(",[[->>+>+<<<]>>>[-<<<+>>>]<[-<+>]<<-]>.")
    for index, inst in enumerate(program.instructions):
        if inst in (Instruction.LOOP_START, Instruction.LOOP_END):
            partner = program.jump_table[index]
            assert program.jump_table[partner] == index
        else:
            assert index not in program.jump_table


def test_jump_table_missing_index_raises_key_error():
    _, table = load("+[-]")
    with pytest.raises(KeyError):
        table[0]
    assert table.get(0) is None
    assert table.get(99, -1) == -1


def test_empty_jump_table():
    table = JumpTable()
    assert len(table) == 0
    assert list(table.pairs()) == []


def test_unmatched_close_raises_loop_not_started():
    with pytest.raises(LoopNotStarted):
        load("]")


def test_unmatched_open_raises_loop_not_ended():
    with pytest.raises(LoopNotEnded):
        load("[")


@pytest.mark.parametrize("source", ["[]]", "+]+[", "[[]]]["])
def test_stray_close_is_reported_before_unclosed_open(source):
    with pytest.raises(LoopNotStarted):
        load(source)


@pytest.mark.parametrize("source", ["[[]", "[[[]]", "+[-[+]"])
def test_unclosed_open_after_full_scan(source):
    with pytest.raises(LoopNotEnded):
        load(source)


def test_loop_not_started_reports_location():
    with pytest.raises(LoopNotStarted) as excinfo:
        load("++\n +]")
    assert (excinfo.value.line, excinfo.value.column) == (2, 3)
    assert str(excinfo.value).startswith("2:3:")


def test_loop_not_ended_reports_innermost_open_bracket():
    with pytest.raises(LoopNotEnded) as excinfo:
        load("[\n[[]")
    assert (excinfo.value.line, excinfo.value.column) == (2, 1)


def test_syntax_errors_share_base_class():
    for source in ("]", "["):
        with pytest.raises(BFSyntaxError):
            load(source)


def test_program_unpacks_as_pair():
    instructions, jump_table = load("[-]")
    assert instructions[1] is Instruction.DECREMENT
    assert jump_table[2] == 0


def test_program_str_round_trips_code_symbols():
    assert str(load("a+b[c-d]e.")) == "+[-]."


def test_instruction_from_symbol():
    assert Instruction.from_symbol("[") is Instruction.LOOP_START
    assert Instruction.from_symbol("x") is None
    assert Instruction.WRITE_BYTE.symbol == "."
