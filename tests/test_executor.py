import io

import pytest

from pascalette.ast import (
    ARITHMETIC_KINDS, CONSTANT_KINDS, RELATIONAL_KINDS, STATEMENT_KINDS,
    Node, NodeKind,
)
from pascalette.errors import ExecutionError, ValueContractError
from pascalette.executor import Executor
from pascalette.interpreter import Interpreter, run_program
from pascalette.symtab import SymtabEntry


def wrap(body):
    return f"PROGRAM test;\nBEGIN\n{body}\nEND."


def run(body):
    out = io.StringIO()
    interp = Interpreter(out=out)
    program = interp.parse(wrap(body))
    assert interp.error_count == 0, out.getvalue()
    interp.run(program)
    return out.getvalue(), interp.symtab


def value_of(symtab, name):
    return symtab.lookup(name).get_value()


def test_precedence_and_associativity():
    _, symtab = run('a := 2 + 3 * 4;\nb := 10 - 3 - 2;\nc := 100 / 10 / 2;\nd := -(2 + 3)')
    assert value_of(symtab, 'a') == 14.0
    assert value_of(symtab, 'b') == 5.0
    assert value_of(symtab, 'c') == 5.0
    assert value_of(symtab, 'd') == -5.0


def test_integer_constants_are_widened_to_real():
    _, symtab = run('x := 7 / 2')
    value = value_of(symtab, 'x')
    assert isinstance(value, float)
    assert value == 3.5


def test_relational_operators():
    _, symtab = run('IF 3 < 5 THEN a := 1;\nIF 3 = 3.0 THEN b := 1;\nIF 2 >= 3 THEN c := 1;\nIF 2 <> 3 THEN d := 1')
    assert [value_of(symtab, name) for name in 'abcd'] == [1.0, 1.0, 0.0, 1.0]


def test_and_or_use_both_operands():
    _, symtab = run(
        'IF (1 < 2) AND (2 < 1) THEN a := 1;\n'
        'IF (1 < 2) OR (2 < 1) THEN b := 1;\n'
        'IF (2 < 1) OR (1 < 2) THEN c := 1;\n'
        'IF (1 < 2) AND (1 < 2) THEN d := 1'
    )
    assert [value_of(symtab, name) for name in 'abcd'] == [0.0, 1.0, 1.0, 1.0]


def test_and_does_not_short_circuit():
    with pytest.raises(ExecutionError):
        run('x := 0;\nIF (1 > 2) AND (1 / x > 0) THEN y := 1')


def test_or_does_not_short_circuit():
    with pytest.raises(ExecutionError):
        run('x := 0;\nIF (1 < 2) OR (1 / x > 0) THEN y := 1')


def test_not():
    _, symtab = run('IF NOT 1 > 2 THEN a := 1;\nIF NOT 1 < 2 THEN b := 1')
    assert value_of(symtab, 'a') == 1.0
    assert value_of(symtab, 'b') == 0.0


def test_unassigned_variables_read_as_zero():
    _, symtab = run('y := x + 1')
    assert value_of(symtab, 'x') == 0.0
    assert value_of(symtab, 'y') == 1.0


def test_repeat_runs_until_test_holds():
    _, symtab = run('x := 0; n := 0;\nREPEAT x := x + 1; n := n + 1 UNTIL x = 3')
    assert value_of(symtab, 'x') == 3.0
    assert value_of(symtab, 'n') == 3.0


def test_repeat_body_runs_at_least_once():
    _, symtab = run('x := 5;\nREPEAT x := x + 1 UNTIL x > 0')
    assert value_of(symtab, 'x') == 6.0


def test_while_may_run_zero_times():
    _, symtab = run('x := 5;\nWHILE x < 0 DO x := x + 1')
    assert value_of(symtab, 'x') == 5.0


def test_while_loop():
    out, symtab = run('x := 0;\nWHILE x < 3 DO BEGIN x := x + 1; write(x) END')
    assert out == '1.02.03.0'
    assert value_of(symtab, 'x') == 3.0


def test_for_to():
    out, symtab = run("FOR i := 1 TO 3 DO BEGIN write(i); write(' ') END")
    assert out == '1.0 2.0 3.0 '
    assert value_of(symtab, 'i') == 4.0


def test_for_downto():
    out, _ = run('FOR i := 3 DOWNTO 1 DO write(i:2)')
    assert out == ' 3 2 1'


def test_for_with_empty_range_runs_zero_times():
    out, symtab = run('FOR i := 5 TO 1 DO write(i)')
    assert out == ''
    assert value_of(symtab, 'i') == 5.0


def test_for_bound_is_evaluated_each_iteration():
    out, _ = run('n := 3;\nFOR i := 1 TO n DO BEGIN write(i:2); n := 2 END')
    assert out == ' 1 2'


def test_if_else():
    out, _ = run("x := 2;\nIF x > 1 THEN write('big') ELSE write('small');\nIF x > 5 THEN write('!') ELSE write('.')")
    assert out == 'big.'


def test_case_runs_first_matching_branch_only():
    out, _ = run("x := 1;\nCASE x OF 1: write('a'); 1, 2: write('b') END")
    assert out == 'a'


def test_case_with_no_match_does_nothing():
    out, _ = run("x := 9;\nCASE x OF 1: write('a'); 2: write('b') END;\nwrite('done')")
    assert out == 'done'


def test_case_negative_constant():
    out, _ = run("x := -2;\nCASE x OF 2: write('pos'); -2: write('neg') END")
    assert out == 'neg'


def test_case_character_constant_never_matches_a_real():
    out, _ = run("x := 1;\nCASE x OF 'a': write('a') END")
    assert out == ''


def test_write_formatting():
    out, _ = run("x := 3.14159;\nwrite(x:8:3); write('|');\nwrite(x:6); write('|');\nwrite('ab':4); write('|');\nwriteln(x)")
    assert out == '   3.142|     3|  ab|3.14159\n'


def test_writeln_without_arguments():
    out, _ = run("write('a'); writeln; writeln(); writeln('b')")
    assert out == 'a\n\nb\n'


def test_division_by_zero_halts_execution():
    out = io.StringIO()
    interp = Interpreter(out=out)
    program = interp.parse(wrap("writeln('before');\nx := 1 / 0;\nwriteln('after')"))
    with pytest.raises(ExecutionError) as excinfo:
        interp.run(program)
    assert excinfo.value.line == 4
    assert excinfo.value.diagnostic == "RUNTIME ERROR at line 4: Division by zero at '/'"
    assert out.getvalue() == 'before\n'


def test_assigning_a_boolean_violates_the_value_contract():
    with pytest.raises(ValueContractError):
        run('x := 1 < 2')


def test_loop_ends_at_a_test_in_the_middle_of_its_body():
    entry = SymtabEntry('x')

    def variable():
        return Node(NodeKind.VARIABLE, 1, 'x', entry=entry)

    increment = Node(NodeKind.ASSIGN, 1, children=[
        variable(),
        Node(NodeKind.ADD, 1, '+', children=[variable(), Node(NodeKind.INTEGER_CONSTANT, 1, '1', 1)]),
    ])
    test = Node(NodeKind.TEST, 1, children=[
        Node(NodeKind.GE, 1, '>=', children=[variable(), Node(NodeKind.INTEGER_CONSTANT, 1, '2', 2)]),
    ])
    loop = Node(NodeKind.LOOP, 1, children=[increment, test, Node(NodeKind.WRITE, 1, children=[variable()])])

    out = io.StringIO()
    Executor(out=out).execute(loop)
    assert out.getvalue() == '1.0'
    assert entry.get_value() == 2.0


def test_every_node_kind_is_handled():
    handled = (STATEMENT_KINDS | RELATIONAL_KINDS | ARITHMETIC_KINDS | CONSTANT_KINDS
               | {NodeKind.PROGRAM, NodeKind.SELECT_BRANCH, NodeKind.SELECT_CONSTANTS,
                  NodeKind.TEST, NodeKind.NOT, NodeKind.NEGATE, NodeKind.AND,
                  NodeKind.OR, NodeKind.VARIABLE})
    assert handled == set(NodeKind)


def test_unexpected_node_kind_is_rejected():
    with pytest.raises(NotImplementedError):
        Executor().evaluate(Node(NodeKind.SELECT_BRANCH))


def test_run_requires_a_program_node():
    with pytest.raises(TypeError):
        Executor().run(Node(NodeKind.COMPOUND))


def test_trace_levels():
    traced = []
    out = io.StringIO()
    interp = Interpreter(out=out)
    program = interp.parse(wrap('x := 2;\nIF x > 1 THEN write(x)'))
    Executor(out=out, debug=lambda level, msg: traced.append((level, msg))).run(program)
    assert traced == [
        (2, 'assign x = 2.0'),
        (3, 'if condition at line 4 -> True'),
        (2, "write '2.0'"),
    ]


def test_run_program_skips_programs_with_errors(capsys):
    interp = run_program(wrap("writeln('hi');\nx := := 1"))
    assert interp.error_count == 1
    assert capsys.readouterr().out == "SYNTAX ERROR at line 4: Unexpected token in expression at ':='\n"


def test_run_program(capsys):
    interp = run_program(wrap("x := 6 * 7;\nwriteln(x:4)"))
    assert interp.error_count == 0
    assert interp.symtab.lookup('x').get_value() == 42.0
    assert capsys.readouterr().out == '  42\n'
