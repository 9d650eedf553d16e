from concurrent.futures import ThreadPoolExecutor

from minish.shell import Shell
from minish.shell.registry import default_registry


def init():
    """Return a shell with a `stop` command that interrupts the shell.
    """
    registry = default_registry()
    shell = Shell(registry=registry)

    def stop(ctx, *args):
        shell.interrupt()

    registry.register('stop', stop)
    return shell, registry


def run(shell: Shell, text: str, timeout=10) -> str:
    # fail instead of blocking forever
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(shell.run, text).result(timeout=timeout)


def test_cancel_in_loop():
    shell, _ = init()
    assert run(shell, 'for i in 1 2 3; do echo $i; stop; done; echo after') == ''
    assert shell.env['i'] == '1'
    assert shell.success


def test_cancel_in_function():
    shell, _ = init()
    shell.run('a=outer')
    shell.run('f() { a=inner; stop; echo after }')

    assert run(shell, 'f x y; echo next') == ''
    assert shell.success

    # the local scope is restored
    assert shell.env['a'] == 'outer'
    assert '1' not in shell.env
    assert '#' not in shell.env
    assert shell.env.depth == 0

    assert shell.run('echo $a') == 'outer'


def test_cancel_in_nested_function():
    shell, _ = init()
    shell.run('inner() { b=2; stop; echo unreachable }')
    shell.run('outer() { a=1; inner $1; echo unreachable }')

    assert run(shell, 'outer x') == ''
    assert 'a' not in shell.env
    assert 'b' not in shell.env
    assert shell.env.depth == 0


def test_cancel_in_pipeline():
    shell, registry = init()

    def produce(ctx, *args):
        while True:
            ctx.stdout.writeln('y')

    def consume(ctx, *args):
        for i, line in enumerate(ctx.stdin.lines()):
            if i == 10:
                shell.interrupt()

    registry.register('produce', produce)
    registry.register('consume', consume)

    assert run(shell, 'produce | consume') == ''
    assert shell.success

    # a new pipeline runs normally
    assert run(shell, 'echo a | cat') == 'a'


def test_cancel_blocked_reader():
    shell, registry = init()

    def wait(ctx, *args):
        # never writes nor returns by itself
        ctx.cancel.wait()
        ctx.stdout.writeln('late')

    registry.register('wait', wait)

    assert run(shell, 'stop | wait | cat') == ''
    assert run(shell, 'echo a | cat') == 'a'
