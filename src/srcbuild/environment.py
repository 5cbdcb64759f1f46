"""
composition of list-valued environment variables

Search-path style variables (PATH, PKG_CONFIG_PATH, PYTHONPATH, ...) are
built up as packages get installed; each newly installed prefix is put in
front of what was there so that it takes priority.  The ordered values are
kept in memory once a variable is touched and mirrored into
:obj:`os.environ` so spawned children inherit them.

There is no locking; callers running package pipelines in parallel must
serialize environment updates themselves.
"""

__all__ = ("EnvironmentStore", "default_environment")

import glob
import os
import sys

from . import const
from .log import logger


class EnvironmentStore:
    """Ordered, list-valued view of a process environment.

    :param environ: mapping the serialized values are written to, defaults
        to :obj:`os.environ`
    :param module_path_var: variable whose additions are also prepended to
        ``sys_path``
    :param sys_path: module search list mirrored for ``module_path_var``,
        defaults to :obj:`sys.path`
    """

    def __init__(self, environ=None, module_path_var=const.MODULE_PATH_VAR,
                 sys_path=None, separator=const.PATH_SEPARATOR):
        self.environ = os.environ if environ is None else environ
        self.module_path_var = module_path_var
        self.sys_path = sys.path if sys_path is None else sys_path
        self.separator = separator
        self._values = {}

    def _seed(self, name):
        try:
            return self._values[name]
        except KeyError:
            pass
        inherited = self.environ.get(name)
        if not inherited:
            return []
        if isinstance(inherited, str):
            return inherited.split(self.separator)
        return [inherited]

    def _store(self, name, values):
        self._values[name] = values
        self.environ[name] = self.separator.join(values)

    def get(self, name):
        """Return the current ordered values of ``name``."""
        return list(self._seed(name))

    def set(self, name, *values):
        """Replace the value of ``name`` with ``values``."""
        self._values.pop(name, None)
        self._store(name, list(values))

    def add(self, name, *values):
        """Put ``values`` in front of the current value of ``name``."""
        self._store(name, list(values) + self._seed(name))

    def add_path(self, name, *paths):
        """Prepend each existing directory of ``paths`` not already in ``name``.

        Paths are processed in the given order, so the last one ends up
        first.  Non-directories and paths already present are skipped.
        """
        for path in paths:
            if not os.path.isdir(path):
                continue
            if path in self._seed(name):
                continue
            logger.debug("adding %r to %s", path, name)
            self.add(name, path)
            if name == self.module_path_var:
                self.sys_path.insert(0, path)

    def update_for_prefix(self, prefix):
        """Make what's installed under ``prefix`` visible to later packages."""
        self.add_path('PATH', os.path.join(prefix, 'bin'))
        self.add_path('PKG_CONFIG_PATH', os.path.join(prefix, 'lib', 'pkgconfig'))

        pyver = f"python{sys.version_info.major}.{sys.version_info.minor}"
        libdir = os.path.join(prefix, 'lib')
        # only pull in lib/ itself for prefixes shipping bare modules; ones
        # with a proper lib/pythonX.Y layout or only compiled libraries don't
        # belong on the module path
        if not os.path.isdir(os.path.join(libdir, pyver)) and \
                _has_modules(libdir):
            self.add_path(self.module_path_var, libdir)
        self.add_path(
            self.module_path_var,
            os.path.join(libdir, pyver, 'site-packages'),
            os.path.join(prefix, 'lib64', pyver, 'site-packages'),
        )

    def export(self):
        """Return the composed environment as a plain dict."""
        return dict(self.environ)

    def __repr__(self):
        return f"<{self.__class__.__name__} vars={sorted(self._values)!r} @{id(self):#8x}>"


def _has_modules(path):
    for _ in glob.iglob(os.path.join(glob.escape(path), '**', '*.py'), recursive=True):
        return True
    return False


_default = None


def default_environment():
    """Return the process-wide store mirroring :obj:`os.environ`."""
    global _default
    if _default is None:
        _default = EnvironmentStore()
    return _default
