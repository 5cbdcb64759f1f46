"""
deciding whether a code generation step has to be rerun

Code generators are slow, so a package type driving one records the exact
command line of the last successful run in a stamp file and only reruns the
generator when:

- regeneration is forced,
- there's no stamp yet,
- the command line changed, or
- the generated build system's own up-to-date check says it's stale.

Otherwise the stamp is just touched so timestamp based dependents see it
as fresh.
"""

__all__ = (
    "GenerationTracker", "add_cmd_to_cmdline", "build_cmdline",
    "makefile_uptodate_check", "stamp_outdated",
)

import os
import re

from snakeoil.fileutils import AtomicWriteFile, readfile, touch
from snakeoil.osutils import ensure_dirs, pjoin

from . import spawn
from .config import default_config
from .exceptions import GenerationError, ToolFailed
from .log import logger

_option_re = re.compile(r"^([\w-]+)$")
_negated_re = re.compile(r"^--no-(.*)")


def add_cmd_to_cmdline(cmd, cmdline):
    """Append ``cmd`` to ``cmdline`` so that later options override earlier ones.

    A bare option (``--foo``, ``--no-foo``) first removes every entry of
    ``cmdline`` starting with it; a negated ``--no-foo`` also removes every
    entry starting with ``--foo``.  Anything else (``--foo=bar``, paths...)
    is appended as is.

    :return: the new list; ``cmdline`` isn't modified
    """
    m = _option_re.match(cmd)
    if m is None:
        return cmdline + [cmd]
    cmd_filter = m.group(1)
    cmdline = [x for x in cmdline if not x.startswith(cmd_filter)]
    m = _negated_re.match(cmd_filter)
    if m is not None:
        positive = f"--{m.group(1)}"
        cmdline = [x for x in cmdline if not x.startswith(positive)]
    return cmdline + [cmd]


def build_cmdline(flags, target, *option_lists):
    """Assemble the generator command line.

    :param flags: flags computed from the package settings
    :param target: specification file appended last
    :param option_lists: raw option lists, later ones taking precedence,
        merged through :func:`add_cmd_to_cmdline`
    :return: sorted flags followed by ``target``
    """
    cmdline = list(flags)
    for options in option_lists:
        for cmd in options:
            cmdline = add_cmd_to_cmdline(cmd, cmdline)
    return sorted(cmdline) + [target]


def makefile_uptodate_check(package, builddir, config=None, env=None, target="check-uptodate"):
    """Ask a generated Makefile whether generation is current.

    :param env: environment for make, defaults to the current process env
    :return: True if up to date, or if there's no Makefile to ask
    """
    if not os.path.isfile(pjoin(builddir, "Makefile")):
        return True
    config = config if config is not None else default_config()
    command = [spawn.find_tool(config, "make"), "-C", builddir, target]
    ret = spawn.run(package, "generate", command, env=env, quiet=True, check=False)
    return ret == 0


def stamp_outdated(stamp, dependencies=(), source_tree=None, exclude=()):
    """Return True if ``stamp`` is missing or older than what it was built from.

    :param dependencies: files (typically dependencies' install stamps) whose
        modification makes ``stamp`` stale; missing ones are ignored
    :param source_tree: directory whose files make ``stamp`` stale when newer
    :param exclude: directory names skipped while walking ``source_tree``
    """
    try:
        stamp_mtime = os.stat(stamp).st_mtime
    except FileNotFoundError:
        return True
    for path in dependencies:
        try:
            if os.stat(path).st_mtime > stamp_mtime:
                logger.debug("%r is newer than %r", path, stamp)
                return True
        except FileNotFoundError:
            continue
    if source_tree is None:
        return False
    exclude = frozenset(exclude)
    stamp = os.path.abspath(stamp)
    for root, dirs, files in os.walk(source_tree):
        dirs[:] = [d for d in dirs if d not in exclude and
                   os.path.abspath(pjoin(root, d)) not in exclude]
        for f in files:
            path = pjoin(root, f)
            if os.path.abspath(path) == stamp:
                continue
            try:
                if os.lstat(path).st_mtime > stamp_mtime:
                    logger.debug("%r is newer than %r", path, stamp)
                    return True
            except FileNotFoundError:
                continue
    return False


class GenerationTracker:
    """Fingerprint based rerun decision for one generated package.

    :param stamp: path of the fingerprint stamp
    :param uptodate_check: callable returning True if the generated build
        system considers itself current; None means always current
    """

    def __init__(self, stamp, uptodate_check=None):
        self.stamp = stamp
        self.uptodate_check = uptodate_check

    def last_cmdline(self):
        """Return the recorded command line, or None without a stamp."""
        data = readfile(self.stamp, none_on_missing=True)
        if data is None:
            return None
        return data.splitlines()

    def needs_regen(self, cmdline, force=False):
        """Return the reason regeneration is needed, or None."""
        if force:
            return "regeneration forced"
        last = self.last_cmdline()
        if last is None:
            return "no previous generation"
        if last != list(cmdline):
            return "command line changed"
        if self.uptodate_check is not None and not self.uptodate_check():
            return "generated build system is out of date"
        return None

    def record(self, cmdline):
        ensure_dirs(os.path.dirname(self.stamp), mode=0o755)
        handler = None
        try:
            handler = AtomicWriteFile(self.stamp)
            handler.write("\n".join(cmdline))
            handler.close()
        finally:
            if handler is not None:
                handler.discard()

    def decide(self, package, cmdline, generator, force=False):
        """Run ``generator`` if needed and keep the stamp current.

        :param cmdline: full, already sorted generator command line
        :param generator: callable invoked with ``cmdline`` to regenerate
        :param force: always regenerate
        :return: True if the generator ran
        """
        cmdline = list(cmdline)
        reason = self.needs_regen(cmdline, force=force)
        if reason is None:
            logger.debug("%s: generation up to date", package)
            package.progress("no need to regenerate %s")
            touch(self.stamp)
            return False

        logger.debug("%s: regenerating: %s", package, reason)
        try:
            generator(cmdline)
        except ToolFailed as e:
            if isinstance(e, GenerationError):
                raise
            raise GenerationError(package, e.message, e.command, e.exitcode) from e
        self.record(cmdline)
        return True
