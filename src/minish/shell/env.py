from contextlib import contextmanager
from typing import Dict, Iterable, List
import logging

from minish.util import crop


class Environment:
    """A dict-like interface to the state of a shell session.
    It mixes local variables and exported (global) variables.

    Properties
    ----------
    cwd : str
        The current working directory.
    env : dict
        Exported variables.
    variables : dict
        Local variables. These shadow exported variables.
    functions : dict
        Function names mapped to their unparsed body.
    """

    def __init__(self, cwd='/', env: Dict[str, str] = None,
                 variables: Dict[str, str] = None,
                 functions: Dict[str, str] = None):
        self.cwd = cwd
        self.env = dict(env or {})
        self.variables = dict(variables or {})
        self.functions = dict(functions or {})

        # snapshots of `variables`, one per active function call
        self._scopes: List[Dict[str, str]] = []

    def __setitem__(self, key: str, value):
        """Let `key` point to `value` in the local scope.
        """
        self.variables[key] = str(value)

    def __getitem__(self, key: str) -> str:
        """Find `key` in all scopes and return the corresponding value.
        """
        if key in self.variables:
            return self.variables[key]

        if key in self.env:
            return self.env[key]

        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return key in self.variables or key in self.env

    def __delitem__(self, key: str):
        if key in self.variables:
            del self.variables[key]
        elif key in self.env:
            del self.env[key]
        else:
            raise KeyError(key)

    def __str__(self) -> str:
        return str({k: crop(str(self[k]), 15) for k in self.keys()})

    def get(self, key: str, default=None):
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self) -> Iterable[str]:
        """Return the keys of all variables.
        Exported keys that are shadowed by local variables are listed once.
        """
        keys = list(self.variables)
        keys += [k for k in self.env if k not in self.variables]
        return keys

    def export(self, key: str, value: str = None):
        """Move or copy a variable to the exported environment.
        """
        if value is None:
            value = self.variables.pop(key, self.env.get(key, ''))

        self.env[key] = str(value)

    def define(self, name: str, body: str):
        if name in self.functions:
            logging.debug(f'Re-define existing function: {name}')

        self.functions[name] = body

    ############################################################################
    # Scopes
    ############################################################################

    @property
    def depth(self) -> int:
        """The number of active function calls.
        """
        return len(self._scopes)

    def snapshot(self) -> Dict[str, str]:
        return dict(self.variables)

    def restore(self, snapshot: Dict[str, str]):
        self.variables = dict(snapshot)

    @contextmanager
    def local_scope(self):
        """Snapshot the local variables and restore them afterwards.
        The restore step runs on every exit path.
        """
        self._scopes.append(self.snapshot())
        try:
            yield self
        finally:
            self.restore(self._scopes.pop())

    def copy(self) -> 'Environment':
        """Return an independent copy, e.g. for a pipeline stage.
        """
        return Environment(self.cwd, self.env, self.variables, self.functions)
