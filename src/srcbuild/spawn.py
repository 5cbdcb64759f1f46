"""
running external tools on behalf of a package

Every external step (patch, generator, up-to-date checks, vcs commands) goes
through :func:`run` so that failures surface uniformly as
:obj:`srcbuild.exceptions.ToolFailed` and the composed environment is what
children see.
"""

__all__ = ("run", "run_get_output", "find_tool")

import os
import sys

from snakeoil import process
from snakeoil.process import spawn

from .exceptions import MissingBinary, ToolFailed
from .log import logger


def find_tool(config, name):
    """Resolve tool ``name`` through ``config`` to an absolute path.

    :raise MissingBinary: if the tool can't be found
    """
    tool = config.tool(name)
    if os.path.isabs(tool):
        return tool
    try:
        return process.find_binary(tool)
    except process.CommandNotFound as exc:
        raise MissingBinary(tool, str(exc)) from exc


def _child_env(env):
    if env is None:
        return dict(os.environ)
    return dict(env)


def run(package, phase, command, cwd=None, env=None, error_cls=ToolFailed,
        quiet=False, check=True):
    """Spawn ``command`` and wait for it.

    :param package: package the command runs for, used in error messages
    :param phase: pipeline step name, used in error messages
    :param command: argument list
    :param cwd: working directory, defaults to the current one
    :param env: environment for the child, defaults to the current process env
    :param error_cls: exception class raised on non-zero exit
    :param quiet: discard the child's stdout and stderr
    :param check: if False, return the exit status instead of raising
    :return: the exit status of the command
    """
    command = list(command)
    logger.debug("%s: %s: running %r in %r", package, phase, command, cwd)
    if quiet:
        fd_pipes = {0: 0, 1: os.open(os.devnull, os.O_WRONLY)}
        fd_pipes[2] = fd_pipes[1]
    else:
        # we're intermixing our output with the child's
        sys.stdout.flush()
        sys.stderr.flush()
        fd_pipes = {0: 0, 1: 1, 2: 2}
    try:
        ret = spawn.spawn(command, cwd=cwd, env=_child_env(env), fd_pipes=fd_pipes)
    finally:
        if quiet:
            os.close(fd_pipes[1])
    if ret != 0 and check:
        raise error_cls(package, phase, command, ret)
    return ret


def run_get_output(package, phase, command, cwd=None, env=None, error_cls=ToolFailed):
    """Spawn ``command`` returning its stdout split into lines.

    :raise error_cls: on non-zero exit
    """
    command = list(command)
    logger.debug("%s: %s: collecting output of %r in %r", package, phase, command, cwd)
    ret, output = spawn.spawn_get_output(command, cwd=cwd, env=_child_env(env))
    if ret != 0:
        raise error_cls(package, phase, command, ret)
    return [line.rstrip('\n') for line in output]
