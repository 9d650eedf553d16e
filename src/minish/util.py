from typing import Iterable, Union


def crop(s: str, n=100, suffix='..') -> str:
    margin = len(suffix)
    if len(s) <= n + margin:
        return s
    return s[:n] + suffix


def is_number(text: str) -> bool:
    try:
        float(text)
        return True
    except (TypeError, ValueError):
        return False


def to_number(text: str) -> Union[int, float]:
    """Convert a string to an int if possible, otherwise to a float.
    Raise a ValueError for non-numeric text.
    """
    try:
        return int(text)
    except ValueError:
        return float(text)


def format_number(x: Union[int, float]) -> str:
    """Render integral floats without a fractional part.
    """
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    return str(x)


def join_lines(lines: Iterable[str]) -> str:
    return '\n'.join(line for line in lines if line)


def is_callable(method) -> bool:
    return hasattr(method, '__call__')
