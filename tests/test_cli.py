import json

import pytest

from plc.__main__ import main

PROGRAM = 'VAL x = 5;\nFUN main() DO print(x); RETURN 3; END\n'


def write(tmp_path, text, name='program.plc'):
    path = tmp_path / name
    path.write_text(text, encoding='utf-8')
    return path


def test_run_exits_with_main_result(tmp_path, capsys):
    path = write(tmp_path, PROGRAM)
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 3
    assert capsys.readouterr().out == '5\n'


def test_type_error_reported_on_stderr(tmp_path, capsys):
    path = write(tmp_path, 'FUN main(): Integer DO RETURN "x"; END')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith('TypeError:')


def test_syntax_error_reported_on_stderr(tmp_path, capsys):
    path = write(tmp_path, 'FUN main(): Integer DO RETURN 0 END')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.strip().endswith('(at offset 32)')


def test_runtime_error_reported_on_stderr(tmp_path, capsys):
    path = write(tmp_path, 'FUN main(): Integer DO RETURN 1 / 0; END')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.strip() == 'RuntimeError: division by zero'


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.plc')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_emit_ast(tmp_path, capsys):
    path = write(tmp_path, PROGRAM)
    main(['--emit-ast', str(path)])
    out_path = capsys.readouterr().out.strip()
    assert out_path == str(path) + '.ast.json'
    with open(out_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    assert data['type'] == 'Source'
    assert data['globals'][0]['resolved_type'] == 'Integer'
    function = data['functions'][0]
    assert function['resolved_return_type'] == 'Integer'
    call = function['body'][0]['expression']
    assert call['name'] == 'print'
    assert call['resolved_type'] == 'Nil'


def test_generate(tmp_path, capsys):
    path = write(tmp_path, PROGRAM)
    main(['--generate', str(path)])
    out = capsys.readouterr().out
    assert out.startswith('public class Main {')
    assert 'final int x = 5;' in out
    assert 'System.out.println(x);' in out


def test_verbose_run_writes_debug_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = write(tmp_path, PROGRAM)
    with pytest.raises(SystemExit):
        main(['-vv', str(path)])
    lines = (tmp_path / 'debug.txt').read_text().splitlines()
    assert lines == ['global x = 5', 'define function main/0']
