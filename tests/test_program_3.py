from pathlib import Path

from pascalette.interpreter import Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_3_loops(capsys):
    with open(EXAMPLES / 'program_3.pas', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter()
    ast = interp.parse(source)
    assert interp.error_count == 0
    interp.run(ast)
    out = capsys.readouterr().out
    assert out.splitlines() == ['  1  2  3', '  3  2  1', '  1  2  3', '  3  2  1']
    assert interp.symtab.lookup('i').get_value() == 3.0
    assert interp.symtab.lookup('j').get_value() == 0.0
    # The control variable ends one step past its bound.
    assert interp.symtab.lookup('k').get_value() == 0.0
