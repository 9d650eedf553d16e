"""Run the stages of a pipeline concurrently.

.. code-block:: sh

    echo "a\\nb" | grep a | wc -l

Each stage runs in a separate thread, with a private copy of the environment.
Stages communicate only through Pipes.
The status of the pipeline is the status of the final stage.
"""
from asyncio import CancelledError
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Tuple
import logging

from minish.errors import BrokenPipe, ShellError
from minish.shell.ast import Command
from minish.shell.streams import IOStream, OutputBuffer, Pipe


@dataclass
class StageResult:
    status: object = None
    error: str = None
    broken_pipe: bool = False


def run_stage(executor, stage: Command, stdin: IOStream, stdout: IOStream) -> StageResult:
    """Run a single command and close its streams afterwards.
    """
    logging.debug(f'start stage: {stage}')
    try:
        return StageResult(executor.run_command(stage, stdin, stdout))
    except BrokenPipe as e:
        return StageResult(str(e), str(e), broken_pipe=True)
    except ShellError as e:
        return StageResult(str(e), str(e))
    finally:
        # signal the end of the stream to the next stage
        if isinstance(stdout, Pipe):
            stdout.close()

        # a writer to a closed pipe fails instead of blocking
        if isinstance(stdin, Pipe):
            stdin.close()

        logging.debug(f'end stage: {stage}')


def run_pipeline(executor, stages: Tuple[Command, ...]) -> Tuple[str, object, List[str]]:
    """Run all stages and wait until every stage has finished.

    Returns
    -------
    output : str
        The output of the final stage.
    status :
        The status of the final stage.
    errors : list
        The error messages of all stages.
    """
    n = len(stages)
    pipes = [Pipe(executor.cancel) for _ in range(n - 1)]
    output = OutputBuffer()

    with ThreadPoolExecutor(max_workers=n) as pool:
        futures = []
        for i, stage in enumerate(stages):
            stdin = pipes[i - 1] if i > 0 else executor.stdin
            stdout = pipes[i] if i < n - 1 else output
            futures.append(pool.submit(run_stage, executor.fork(),
                                       stage, stdin, stdout))

        try:
            results = [future.result() for future in futures]
        except CancelledError:
            executor.cancel.set()
            for pipe in pipes:
                pipe.close()
            raise

    errors = []
    for i, result in enumerate(results):
        if result.error is None:
            continue

        if i < n - 1 and result.broken_pipe:
            logging.debug(f'stage {i}: {result.error}')
            continue

        errors.append(result.error)

    return str(output), results[-1].status, errors

