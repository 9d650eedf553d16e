"""A filesystem-like interface for the files that commands and scripts use.

Directories are represented by nested dicts and files by strings.

.. code-block:: python

    fs = MemoryFileSystem({'home': {'user': {'notes.txt': 'hello'}}})
    fs.read('/home/user/notes.txt')
"""
from abc import ABC, abstractmethod
from typing import List, Union
import logging
import os

from minish.errors import ShellError

Tree = Union[dict, str]


def split(path: str) -> List[str]:
    return [part for part in path.split('/') if part and part != '.']


class FileSystem(ABC):
    @abstractmethod
    def read(self, path: str) -> str:
        """Return the content of a file or raise a ShellError.
        """

    @abstractmethod
    def write(self, path: str, text: str, append=False):
        pass

    @abstractmethod
    def mkdir(self, path: str):
        """Create a directory, including its parents.
        """

    @abstractmethod
    def remove(self, path: str):
        """Remove a file or a directory, including its content.
        """

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def isdir(self, path: str) -> bool:
        pass

    @abstractmethod
    def listdir(self, path: str) -> List[str]:
        pass

    def isfile(self, path: str) -> bool:
        return self.exists(path) and not self.isdir(path)


class MemoryFileSystem(FileSystem):
    def __init__(self, root: dict = None, **dict_kwds):
        if root is None:
            self.root = dict(**dict_kwds)
        else:
            self.root = root

    def get(self, path: str) -> Tree:
        node = self.root
        for part in split(path):
            if part == '..':
                raise ShellError(f'Unsupported path: {path}')

            if not isinstance(node, dict) or part not in node:
                raise ShellError(f'No such file or directory: {path}')

            node = node[part]

        return node

    def read(self, path: str) -> str:
        node = self.get(path)
        if isinstance(node, dict):
            raise ShellError(f'Is a directory: {path}')
        return node

    def write(self, path: str, text: str, append=False):
        if not split(path):
            raise ShellError(f'Is a directory: {path}')

        if '..' in split(path):
            raise ShellError(f'Unsupported path: {path}')

        *parents, name = split(path)
        node = self.root
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ShellError(f'Not a directory: {part}')

        if isinstance(node.get(name), dict):
            raise ShellError(f'Is a directory: {path}')

        if append:
            text = node.get(name, '') + text

        logging.debug(f'write: {path}')
        node[name] = text

    def mkdir(self, path: str):
        node = self.root
        for part in split(path):
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ShellError(f'Not a directory: {part}')

    def exists(self, path: str) -> bool:
        try:
            self.get(path)
            return True
        except ShellError:
            return False

    def isdir(self, path: str) -> bool:
        return self.exists(path) and isinstance(self.get(path), dict)

    def listdir(self, path: str) -> List[str]:
        node = self.get(path)
        if not isinstance(node, dict):
            return [split(path)[-1]]
        return sorted(node)

    def remove(self, path: str):
        if not split(path):
            raise ShellError(f'Cannot remove the root directory: {path}')

        *parents, name = split(path)
        parent = self.get('/'.join(parents))
        if not isinstance(parent, dict) or name not in parent:
            raise ShellError(f'No such file or directory: {path}')

        logging.debug(f'remove: {path}')
        del parent[name]


class LocalFileSystem(FileSystem):
    """Read-only access to the files on disk.
    """

    def read(self, path: str) -> str:
        try:
            with open(path) as f:
                return f.read()
        except OSError as e:
            raise ShellError(f'Cannot read {path}: {e.strerror}')

    def write(self, path: str, text: str, append=False):
        raise ShellError(f'Read-only filesystem: {path}')

    def mkdir(self, path: str):
        raise ShellError(f'Read-only filesystem: {path}')

    def remove(self, path: str):
        raise ShellError(f'Read-only filesystem: {path}')

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def isdir(self, path: str) -> bool:
        return os.path.isdir(path)

    def listdir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError as e:
            raise ShellError(f'Cannot access {path}: {e.strerror}')
