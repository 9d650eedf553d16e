from pytest import raises

from minish.errors import ShellError
from minish.filesystem import MemoryFileSystem
from minish.shell import CommandNotFound, Environment, Shell
from minish.shell.builtins import Builtins, compare, parse_flags, unescape
from minish.shell.registry import CommandRegistry, Context, default_registry
from minish.shell.streams import InputText


def init(**kwds) -> Shell:
    home = {'numbers.txt': '3\n1\n2\n',
            'notes.txt': 'hello world\nbye\n',
            'mixed.txt': '10\n9\n',
            'script.sh': 'x=5\necho $x\n',
            'docs': {}}
    fs = MemoryFileSystem({'home': {'user': home}})
    return Shell(fs=fs, **kwds)


def test_builtins_meta():
    assert 'echo' in Builtins
    assert '_private' not in Builtins
    assert Builtins['echo'] == Builtins.echo

    with raises(KeyError):
        Builtins['unknown']

    names = [method.__name__ for method in Builtins]
    assert 'grep' in names
    assert 'bracket' in names


def test_echo():
    shell = init()
    assert shell.run('echo -n a') == 'a'
    assert shell.run('echo "a\\tb"') == 'a\tb'
    assert shell.run('echo') == ''


def test_printf():
    shell = init()
    assert shell.run('printf "%s=%d" a 3.7') == 'a=3'
    assert shell.run('printf "%s %s" a') == 'a '
    assert shell.run('printf "100%%"') == '100%'


def test_cat():
    shell = init()
    assert shell.run('cat numbers.txt') == '3\n1\n2'
    assert shell.run('cat numbers.txt mixed.txt') == '3\n1\n2\n10\n9'
    assert shell.run('cat missing.txt') == \
        'minish: No such file or directory: /home/user/missing.txt'
    assert not shell.success


def test_sort():
    shell = init()
    assert shell.run('sort numbers.txt') == '1\n2\n3'
    assert shell.run('sort -r numbers.txt') == '3\n2\n1'
    assert shell.run('sort mixed.txt') == '10\n9'
    assert shell.run('sort -n mixed.txt') == '9\n10'
    assert shell.run('sort -rn mixed.txt') == '10\n9'


def test_head():
    shell = init()
    assert shell.run('head -n 2 numbers.txt') == '3\n1'
    assert shell.run('head -1 numbers.txt') == '3'
    assert shell.run('head numbers.txt') == '3\n1\n2'

    assert shell.run('head -n x numbers.txt') == \
        'minish: head: invalid number of lines: x'
    assert not shell.success


def test_wc():
    shell = init()
    assert shell.run('wc -l numbers.txt') == '3'
    assert shell.run('wc -w notes.txt') == '3'
    assert shell.run('wc notes.txt') == '2 3 16'


def test_grep():
    shell = init()
    assert shell.run('grep hello notes.txt') == 'hello world'
    assert shell.run('grep -v hello notes.txt') == 'bye'
    assert shell.run('grep -i HELLO notes.txt') == 'hello world'
    assert shell.run('grep -c o notes.txt') == '1'

    assert shell.run('grep xyz notes.txt') == ''
    assert not shell.success

    assert shell.run('grep') == 'minish: grep: missing pattern'


def test_pwd_cd_ls():
    shell = init()
    assert shell.run('pwd') == '/home/user'
    assert shell.run('ls') == 'docs\nmixed.txt\nnotes.txt\nnumbers.txt\nscript.sh'

    shell.run('cd docs')
    assert shell.run('pwd') == '/home/user/docs'
    assert shell.run('ls') == ''

    shell.run('cd ..')
    assert shell.run('pwd') == '/home/user'

    shell.run('cd /')
    assert shell.run('ls') == 'home'

    shell.run('cd')
    assert shell.run('pwd') == '/home/user'

    assert shell.run('cd notes.txt') == \
        'minish: cd: no such directory: /home/user/notes.txt'


def test_redirection():
    shell = init()
    shell.run('echo a > out.txt')
    shell.run('echo b >> out.txt')
    assert shell.run('cat out.txt') == 'a\nb'
    assert shell.run('cat < out.txt') == 'a\nb'
    assert shell.run('sort -r < out.txt > sorted.txt') == ''
    assert shell.run('cat sorted.txt') == 'b\na'

    shell.run('name=out')
    assert shell.run('cat $name.txt') == 'a\nb'


def test_read():
    shell = init(stdin=InputText('a b c\nd\n'))
    shell.run('read x y')
    assert shell.env['x'] == 'a'
    assert shell.env['y'] == 'b c'

    shell.run('read')
    assert shell.env['REPLY'] == 'd'

    shell.run('read z')
    assert not shell.success


def test_test():
    shell = init()
    for line in ['test 1 -lt 2', '[ 1 -lt 2 ]', 'test -f notes.txt', 'test -d docs',
                 'test -e docs', 'test -z ""', 'test -n a', 'test ! -e x',
                 '[ a = a ]', '[ a != b ]', 'test a']:
        shell.run(line)
        assert shell.success, line

    for line in ['test 2 -lt 1', 'test -d notes.txt', 'test -f x', 'test -n ""', 'test']:
        shell.run(line)
        assert not shell.success, line

    assert shell.run('[ 1 -lt 2') == "minish: [: missing `]'"
    assert shell.run('test a -foo b') == 'minish: unknown operator: -foo'
    assert shell.run('test -x a') == 'minish: test: unknown option: -x'


def test_compare():
    assert compare('10', '-gt', '9')
    assert compare('10', '==', '10.0')
    assert compare('b', '>', 'a')
    assert compare('10', '<', 'a')
    assert not compare('a', '-eq', 'b')

    with raises(ShellError):
        compare('a', '~', 'b')


def test_exit_type_error():
    shell = init()
    assert shell.run('exit x') == 'minish: exit: numeric argument required: x'
    assert not shell.success


def test_help():
    shell = init()
    result = shell.run('help')
    assert 'Commands:' in result
    assert 'grep' in result


def test_sh():
    shell = init()
    assert shell.run('sh -c "echo a; echo b"') == 'a\nb'
    assert shell.run('sh script.sh') == '5'
    assert shell.env['x'] == '5'

    shell.run('x=1')
    assert shell.run('. script.sh') == '5'

    assert shell.run('sh') == 'minish: sh: missing script'


def test_set_invalid():
    shell = init()
    assert shell.run('set a b') == \
        'minish: set: invalid arguments, expected: set NAME=VALUE'


def test_unescape():
    assert unescape('a\\nb') == 'a\nb'
    assert unescape('a\\\\n') == 'a\\n'
    assert unescape('\\x') == '\\x'


def test_parse_flags():
    assert parse_flags(['-rn', 'x'], 'rn') == ({'r', 'n'}, ['x'])
    assert parse_flags(['-x', 'y'], 'rn') == (set(), ['-x', 'y'])
    assert parse_flags([], 'rn') == (set(), [])


def test_registry():
    registry = CommandRegistry()
    with raises(CommandNotFound):
        registry.resolve('hello')

    def hello(ctx, *args):
        ctx.print('hello', *args)

    registry.register('hello', hello)
    assert 'hello' in registry
    assert list(registry) == ['hello']


def test_registry_custom_command():
    registry = default_registry()
    assert '[' in registry
    assert '.' in registry

    def hello(ctx, *args):
        ctx.print('hello', *args)

    registry.register('hello', hello)
    shell = Shell(registry=registry)
    assert shell.run('hello world') == 'hello world'
    assert shell.run('hello | cat') == 'hello'


def test_context_path():
    ctx = Context(Environment('/home/user', {'HOME': '/root'}))
    assert ctx.path('a.txt') == '/home/user/a.txt'
    assert ctx.path('../a.txt') == '/home/a.txt'
    assert ctx.path('/a/./b') == '/a/b'
    assert ctx.path('~') == '/root'
    assert ctx.path('~/a') == '/root/a'


def test_mkdir():
    shell = init()
    shell.run('mkdir new')
    assert shell.fs.isdir('/home/user/new')

    shell.run('mkdir -p a/b/c')
    assert shell.fs.isdir('/home/user/a/b/c')
    shell.run('mkdir -p a/b')
    assert shell.success

    assert shell.run('mkdir x/y') == 'minish: mkdir: no such directory: /home/user/x'
    assert shell.run('mkdir docs') == \
        'minish: mkdir: cannot create directory /home/user/docs: File exists'
    assert shell.run('mkdir') == 'minish: mkdir: missing operand'


def test_touch():
    shell = init()
    shell.run('touch a.txt docs/b.txt')
    assert shell.run('cat a.txt') == ''
    assert shell.fs.isfile('/home/user/docs/b.txt')

    # existing files are unchanged
    shell.run('touch notes.txt')
    assert shell.run('cat notes.txt') == 'hello world\nbye'

    assert shell.run('touch') == 'minish: touch: missing file operand'


def test_rm():
    shell = init()
    shell.run('rm notes.txt')
    assert not shell.fs.exists('/home/user/notes.txt')

    assert shell.run('rm docs') == \
        'minish: rm: cannot remove /home/user/docs: Is a directory, use -r'
    assert shell.fs.isdir('/home/user/docs')

    shell.run('rm -r docs')
    assert not shell.fs.exists('/home/user/docs')

    assert shell.run('rm missing.txt') == \
        'minish: rm: no such file or directory: /home/user/missing.txt'
    shell.run('rm -f missing.txt')
    assert shell.success


def test_redirect_to_root():
    shell = init()
    assert shell.run('echo hi > /; echo next') == 'minish: Is a directory: /\nnext'
    assert not shell.fs.exists('/hi')
