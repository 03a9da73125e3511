from pathlib import Path

from pascalette.interpreter import Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_1(capsys):
    with open(EXAMPLES / 'program_1.pas', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter()
    ast = interp.parse(source)
    assert interp.error_count == 0
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'
