"""
shared orchestration for getting a package's source tree in place

Concrete importers implement :meth:`Importer.checkout`,
:meth:`Importer.update` and :meth:`Importer.status` for one kind of
repository; :meth:`Importer.import_package` decides which to run, keeps the
patch stack in sync and falls back to substitute importers on failure.
"""

__all__ = ("ImportStatus", "Status", "Importer")

import enum
import os
import shutil

from ..config import default_config
from ..exceptions import ConfigError, ImportFailure
from ..log import logger
from .fallback import default_registry
from .patches import PatchSynchronizer


class ImportStatus(enum.IntEnum):
    """State of a checkout relative to its remote repository."""

    # remote and local are at the same point
    UP_TO_DATE = 0
    # local contains everything remote has plus new commits
    ADVANCED = 1
    # next update will require a merge
    NEEDS_MERGE = 2
    # next update will be a fast-forward
    SIMPLE_UPDATE = 3


class Status:
    """Result of :meth:`Importer.status`.

    :ivar status: :obj:`ImportStatus` member, None until determined
    :ivar uncommitted_code: True if the working copy has uncommitted changes
    :ivar remote_commits: commits in the remote missing locally
    :ivar local_commits: commits in the local copy missing from the remote
    """

    __slots__ = ("status", "uncommitted_code", "remote_commits", "local_commits")

    def __init__(self, status=None, uncommitted_code=False,
                 remote_commits=(), local_commits=()):
        self.status = status
        self.uncommitted_code = uncommitted_code
        self.remote_commits = list(remote_commits)
        self.local_commits = list(local_commits)

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} status={self.status!r} "
            f"uncommitted_code={self.uncommitted_code!r} "
            f"remote={len(self.remote_commits)} local={len(self.local_commits)}>"
        )


def _normalize_patches(patches):
    if not patches:
        return []
    if isinstance(patches, str):
        return [patches]
    return list(patches)


class Importer:
    """Base class for the objects putting sources into a package's srcdir.

    :param patches: patch, or sequence of patches, applied after import
    :param config: :obj:`srcbuild.config.BuildConfig`, defaults to the shared one
    :param fallbacks: :obj:`srcbuild.importer.fallback.FallbackRegistry`,
        defaults to the shared one
    :param options: importer specific options, kept in :attr:`options`
    """

    def __init__(self, patches=None, config=None, fallbacks=None, **options):
        self.options = dict(options, patches=patches)
        self.patches = _normalize_patches(patches)
        self.config = config if config is not None else default_config()
        self.fallbacks = fallbacks if fallbacks is not None else default_registry()
        self.patcher = PatchSynchronizer(self.config)

    def checkout(self, package):
        """Create ``package.srcdir`` from the repository."""
        raise NotImplementedError(self, "checkout")

    def update(self, package):
        """Bring the existing ``package.srcdir`` up to date."""
        raise NotImplementedError(self, "update")

    def status(self, package):
        """Return a :obj:`Status` for ``package.srcdir``."""
        raise NotImplementedError(self, "status")

    def patch(self, package):
        """Reconcile the applied patches of ``package`` with :attr:`patches`."""
        return self.patcher.sync(package, self.patches)

    def import_package(self, package):
        """Check out or update ``package``'s sources and patch them."""
        srcdir = package.srcdir
        if os.path.isdir(srcdir):
            if not self.config.do_update:
                if self.config.verbose:
                    package.observer.info("not updating %s", package.name)
                return
            package.progress("updating %s")
            try:
                self.update(package)
            except Exception as e:
                return self.fallback(e, package, "import_package", package)
            self.patch(package)
            package.updated = True
        elif os.path.exists(srcdir):
            raise ConfigError(f"{srcdir} exists but is not a directory")
        else:
            try:
                package.progress("checking out %s")
                self.checkout(package)
                self.patch(package)
                package.updated = True
            except ImportFailure as e:
                self._remove_partial(srcdir)
                return self.fallback(e, package, "import_package", package)
            except BaseException:
                self._remove_partial(srcdir)
                raise

    @staticmethod
    def _remove_partial(srcdir):
        logger.debug("removing partial checkout %r", srcdir)
        shutil.rmtree(srcdir, ignore_errors=True)

    def fallback(self, error, package, operation, *args, **kwargs):
        """Retry ``operation`` on a substitute importer, or re-raise ``error``.

        :param error: the exception that made this importer fail
        :param operation: name of the importer method to rerun
        """
        substitute = self.fallbacks.find_substitute(package, self)
        if substitute is None:
            raise error
        logger.info("%s: %s failed, falling back to %r", package, operation, substitute)
        return getattr(substitute, operation)(*args, **kwargs)
