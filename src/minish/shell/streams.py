"""Streams that connect commands.

- Pipe: a blocking FIFO between two pipeline stages
- OutputBuffer: collects the output of a single command
- TextStream: wraps a file object such as sys.stdin
"""
from abc import ABC, abstractmethod
from asyncio import CancelledError
from collections import deque
from threading import Condition, Event
from typing import Iterator, List, TextIO, Union
import logging

from minish.errors import BrokenPipe, ShellPipeError

# the interval at which blocked readers check for cancellation
POLL_INTERVAL = 0.05


class IOStream(ABC):
    @abstractmethod
    def read(self) -> Union[str, None]:
        """Return the next chunk of text, or None at the end of the stream.
        """

    def readline(self) -> Union[str, None]:
        return self.read()

    @abstractmethod
    def write(self, data: str):
        pass

    def writeln(self, data: str = ''):
        self.write(f'{data}\n')

    def close(self):
        pass

    def lines(self) -> Iterator[str]:
        while True:
            line = self.readline()
            if line is None:
                return
            yield line


class Pipe(IOStream):
    """A FIFO buffer that is shared by a writer and a reader.

    Reads block until data is available or the pipe is closed.
    A closed pipe is drained first, after which reads return None.
    """

    def __init__(self, cancel: Event = None):
        self.buffer = deque()
        self.closed = False
        self.cancel = cancel
        self.condition = Condition()

        # the remainder of a chunk that was partially consumed by readline
        self._partial = ''

    def write(self, data: str):
        with self.condition:
            self.check_cancelled()
            if self.closed:
                raise BrokenPipe('broken pipe')

            self.buffer.append(str(data))
            self.condition.notify_all()

    def read(self) -> Union[str, None]:
        with self.condition:
            self.check_cancelled()
            if self._partial:
                data, self._partial = self._partial, ''
                return data

            return self._next_chunk()

    def readline(self) -> Union[str, None]:
        """Return a single line without its trailing newline.
        """
        with self.condition:
            self.check_cancelled()
            line = self._partial
            self._partial = ''

            while '\n' not in line:
                chunk = self._next_chunk()
                if chunk is None:
                    # the last line need not be terminated
                    return line if line else None

                line += chunk

            line, self._partial = line.split('\n', 1)
            return line

    def close(self):
        with self.condition:
            if not self.closed:
                logging.debug('close pipe')

            self.closed = True
            self.condition.notify_all()

    def check_cancelled(self):
        if self.cancel is not None and self.cancel.is_set():
            raise CancelledError()

    def _next_chunk(self) -> Union[str, None]:
        # assume that the condition is acquired
        while True:
            self.check_cancelled()
            if self.buffer:
                return self.buffer.popleft()

            if self.closed:
                return None

            self.condition.wait(POLL_INTERVAL)


class OutputBuffer(IOStream):
    """Collect the output of a command.
    """

    def __init__(self):
        self.chunks: List[str] = []

    def read(self) -> Union[str, None]:
        if not self.chunks:
            return None
        return self.chunks.pop(0)

    def write(self, data: str):
        self.chunks.append(str(data))

    def getvalue(self) -> str:
        return ''.join(self.chunks)

    def __str__(self):
        return self.getvalue().rstrip('\n')


class InputText(IOStream):
    """A read-only stream with fixed content, e.g. the input of a redirection.
    """

    def __init__(self, text: str = ''):
        self.pending = deque(text.splitlines())

    def read(self) -> Union[str, None]:
        if not self.pending:
            return None

        text = '\n'.join(self.pending) + '\n'
        self.pending.clear()
        return text

    def readline(self) -> Union[str, None]:
        if not self.pending:
            return None
        return self.pending.popleft()

    def write(self, data: str):
        raise ShellPipeError('Cannot write to an input stream')


class TextStream(IOStream):
    """Wrap a file object such as sys.stdin or sys.stdout.
    """

    def __init__(self, file: TextIO):
        self.file = file

    def read(self) -> Union[str, None]:
        data = self.file.read()
        return data if data else None

    def readline(self) -> Union[str, None]:
        line = self.file.readline()
        if not line:
            return None
        return line.rstrip('\n')

    def write(self, data: str):
        self.file.write(data)
        self.file.flush()
