"""
keeping a source tree's applied patch stack in sync with the wanted one

The patches currently applied to a source tree are recorded, one path per
line, in a stamp file at the top of the tree.  Reconciling never tries to be
clever: every applied patch is removed (last applied first) and every wanted
patch is applied in order.  Patches aren't assumed to commute, so this is
the only ordering that's always correct.

The stamp is rewritten after every reconciliation, including failed ones, so
it always describes what is really applied.
"""

__all__ = ("PatchSynchronizer", "read_patch_stamp", "write_patch_stamp")

from snakeoil.fileutils import AtomicWriteFile, readfile
from snakeoil.osutils import pjoin

from .. import const, spawn
from ..config import default_config
from ..exceptions import PatchFailed
from ..log import logger


def read_patch_stamp(path):
    """Return the ordered list of patches recorded in the stamp at ``path``.

    A missing or empty stamp means nothing is applied.
    """
    data = readfile(path, none_on_missing=True)
    if not data:
        return []
    return data.splitlines()


def write_patch_stamp(path, patches):
    handler = None
    try:
        handler = AtomicWriteFile(path)
        handler.write("\n".join(patches))
        handler.close()
    finally:
        if handler is not None:
            handler.discard()


class PatchSynchronizer:
    """Apply a package's wanted patches with the external patch tool.

    :param config: :obj:`srcbuild.config.BuildConfig` used to locate the
        patch tool, defaults to the shared one
    """

    stamp_name = const.PATCHES_STAMP

    def __init__(self, config=None):
        self.config = config if config is not None else default_config()

    def stamp_path(self, package):
        return pjoin(package.srcdir, self.stamp_name)

    def applied(self, package):
        """Return the patches currently applied to ``package``'s srcdir."""
        return read_patch_stamp(self.stamp_path(package))

    def _call_patch(self, package, path, reverse):
        command = [spawn.find_tool(self.config, 'patch'), '-p0']
        if reverse:
            command.append('-R')
        command.extend(['-i', path])
        ret = spawn.run(package, 'patch', command, cwd=package.srcdir, check=False)
        if ret != 0:
            raise PatchFailed(package, path, command, ret, reverse=reverse)

    def apply(self, package, path):
        logger.debug("%s: applying %r", package, path)
        self._call_patch(package, path, False)

    def unapply(self, package, path):
        logger.debug("%s: unapplying %r", package, path)
        self._call_patch(package, path, True)

    def sync(self, package, patches):
        """Make ``patches`` exactly the applied patch stack of ``package``.

        :return: True if anything was changed, False if the stack was
            already as requested
        """
        patches = list(patches)
        current = self.applied(package)
        if current == patches:
            return False

        if patches:
            package.progress("patching %s")

        try:
            while current:
                self.unapply(package, current[-1])
                current.pop()
            for path in patches:
                self.apply(package, path)
                current.append(path)
        finally:
            write_patch_stamp(self.stamp_path(package), current)
        return True
