from pathlib import Path

from pascalette.interpreter import compile_module

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_5_syntax_errors(capsys):
    interp = compile_module(str(EXAMPLES / 'program_5.pas'))
    assert interp.error_count == 3
    out = capsys.readouterr().out
    assert out.splitlines() == [
        "SYNTAX ERROR at line 4: Unexpected token in expression at ':='",
        "SYNTAX ERROR at line 6: Unexpected token in expression at 'THEN'",
        "SYNTAX ERROR at line 7: Expecting ) at ';'",
    ]
    # Statements around the errors were still parsed, but nothing ran.
    assert interp.symtab.lookup('v').get_value() == 0.0
