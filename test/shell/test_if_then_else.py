from minish.filesystem import MemoryFileSystem
from minish.shell import Shell


def test_shell_if_then():
    shell = Shell()
    assert shell.run('if true; then echo 1; fi') == '1'
    assert shell.run('if false; then echo 1; fi') == ''
    assert shell.run('if true\nthen\necho 1\nfi') == '1'


def test_shell_if_then_else():
    shell = Shell()
    assert shell.run('if false; then echo 1; else echo 2; fi') == '2'
    assert shell.run('if true; then echo 1; echo 2; else echo 3; fi') == '1\n2'


def test_shell_elif():
    shell = Shell()
    text = 'if [ $x -eq 1 ]; then echo a; elif [ $x -eq 2 ]; then echo b; else echo c; fi'

    shell.run('x=1')
    assert shell.run(text) == 'a'
    shell.run('x=2')
    assert shell.run(text) == 'b'
    shell.run('x=3')
    assert shell.run(text) == 'c'


def test_shell_if_test_strings():
    shell = Shell()
    shell.run('a=abc')
    assert shell.run('if [ $a = abc ]; then echo 1; fi') == '1'
    assert shell.run('if [ $a != abc ]; then echo 1; fi') == ''
    assert shell.run('if [ -z "" ]; then echo 1; fi') == '1'
    assert shell.run('if [ -n "" ]; then echo 1; fi') == ''
    assert shell.run('if [ ! -n "" ]; then echo 1; fi') == '1'


def test_shell_if_test_numbers():
    shell = Shell()
    assert shell.run('if [ 2 -gt 10 ]; then echo 1; else echo 2; fi') == '2'
    assert shell.run('if [ 2 -lt 10 ]; then echo 1; else echo 2; fi') == '1'
    assert shell.run('if [ 2.5 -ge 2.5 ]; then echo 1; fi') == '1'


def test_shell_if_test_files():
    fs = MemoryFileSystem({'home': {'user': {'notes.txt': 'abc', 'docs': {}}}})
    shell = Shell(fs=fs)
    assert shell.run('if [ -f notes.txt ]; then echo 1; fi') == '1'
    assert shell.run('if [ -d notes.txt ]; then echo 1; fi') == ''
    assert shell.run('if [ -d docs ]; then echo 1; fi') == '1'
    assert shell.run('if [ -e /home/user/docs ]; then echo 1; fi') == '1'
    assert shell.run('if [ -e missing ]; then echo 1; fi') == ''


def test_shell_if_command():
    shell = Shell()
    assert shell.run('if echo "a\\nb" | grep b; then echo found; fi') == 'b\nfound'
    assert shell.run('if echo a | grep b; then echo found; fi') == ''


def test_shell_if_function():
    shell = Shell()
    shell.run('yes() { true }; no() { false }')
    assert shell.run('if yes; then echo 1; else echo 2; fi') == '1'
    assert shell.run('if no; then echo 1; else echo 2; fi') == '2'


def test_shell_nested_if():
    shell = Shell()
    text = 'if true; then if false; then echo a; else echo b; fi; echo c; fi'
    assert shell.run(text) == 'b\nc'


def test_shell_if_error_in_condition():
    shell = Shell()
    assert shell.run('if unknown; then echo 1; else echo 2; fi') == \
        'minish: command not found: unknown\n2'


def test_if_bracket_less_greater():
    shell = Shell()
    assert shell.run('if [ 2 > 3 ]; then echo yes; else echo no; fi') == 'no'
    assert shell.run('if [ 2 < 3 ]; then echo yes; else echo no; fi') == 'yes'
    assert shell.run('if [ 10 > 9 ]; then echo yes; else echo no; fi') == 'yes'
    assert shell.run('if [ b < a ]; then echo yes; else echo no; fi') == 'no'

    shell.run('[ 3 > 2 ]')
    assert shell.success

    # no files are written
    assert shell.fs.listdir('/home/user') == []
