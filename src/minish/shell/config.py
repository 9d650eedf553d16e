from dataclasses import dataclass, field
from typing import Dict


def default_env() -> Dict[str, str]:
    return {'USER': 'user', 'HOME': '/home/user', 'PATH': '/bin:/usr/bin'}


@dataclass
class ShellConfig:
    """Settings of a shell session.

    Properties
    ----------
    max_loop_iterations : int
        The maximum number of iterations of a single for/while loop.
    max_block_iterations : int
        The maximum number of statements in a single parsed block.
    expand_unset_to_empty : bool
        Expand unset variables to an empty string instead of their literal text.
    """
    max_loop_iterations: int = 100
    max_block_iterations: int = 100
    max_call_depth: int = 100
    expand_unset_to_empty: bool = False
    cwd: str = '/home/user'
    env: Dict[str, str] = field(default_factory=default_env)
    prompt: str = '$ '
    error_prefix: str = 'minish'
