"""
package description consumed by the importer and package-type handlers
"""

__all__ = ("Package",)

import os

from .observer import decorate_build_method, null_output


class Package:
    """A single package of a build.

    :ivar name: package name, used in messages
    :ivar srcdir: where the source tree is imported to
    :ivar prefix: installation root
    :ivar builddir: where the build happens, defaults to ``srcdir/build``
    :ivar dependencies: names of the packages this one depends on
    :ivar importer: :obj:`srcbuild.importer.base.Importer` for the source tree
    :ivar observer: progress sink
    :ivar updated: set once the source tree has been checked out or updated
    """

    def __init__(self, name, srcdir, prefix, builddir=None, dependencies=(),
                 importer=None, observer=None):
        self.name = name
        self.srcdir = srcdir
        self.prefix = prefix
        if builddir is None:
            builddir = os.path.join(srcdir, 'build')
        elif not os.path.isabs(builddir):
            builddir = os.path.join(srcdir, builddir)
        self.builddir = builddir
        self.dependencies = list(dependencies)
        self.importer = importer
        self.observer = observer if observer is not None else null_output()
        self.updated = False

    def progress(self, msg):
        """Report progress; ``%s`` in ``msg`` is replaced by the package name."""
        self.observer.info(msg, self.name)

    @decorate_build_method("import")
    def import_source(self):
        if self.importer is None:
            return
        self.importer.import_package(self)

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name!r} srcdir={self.srcdir!r} @{id(self):#8x}>"
