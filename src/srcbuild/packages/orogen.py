"""
oroGen generated component packages

oroGen is a specification and code generation tool for Orocos/RTT
components; the generated sources are then built with CMake.  Generation is
slow, so it is only rerun when the command line changed or the generated
build system reports itself out of date (see :mod:`srcbuild.generate`).
"""

__all__ = ("Orogen",)

import glob
import os
import re

from snakeoil.osutils import pjoin, unlink_if_exists
from snakeoil.process import CommandNotFound, find_binary

from .. import spawn
from ..config import default_config
from ..environment import default_environment
from ..exceptions import ConfigError, GenerationError
from ..generate import GenerationTracker, build_cmdline, makefile_uptodate_check, stamp_outdated
from ..observer import decorate_build_method
from ..package import Package

_version_re = re.compile(r'VERSION\s*=\s*"(.+)"\s*$')

# directories of the source tree that never make the generated code stale
_source_excludes = ('.orogen', '.git', '.svn', 'build', 'templates')


class Orogen(Package):

    # class-wide defaults, overridable per instance
    corba = None
    extended_states = None
    always_regenerate = None
    default_type_export_policy = 'used'
    transports = ('corba', 'typelib', 'mqueue')
    orogen_options = ()
    _orocos_target = None

    def __init__(self, *args, orogen_file=None, config=None, environment=None, **kwargs):
        super().__init__(*args, **kwargs)
        self._orogen_file = orogen_file
        self.config = config
        self.environment = environment if environment is not None else default_environment()
        self.orogen_options = []
        self._orogen_tool_path = None
        self._orogen_version = None

    @property
    def build_config(self):
        if self.config is None:
            return default_config()
        return self.config

    @property
    def orocos_target(self):
        """Target used to generate and build components."""
        if self._orocos_target is not None:
            return self._orocos_target
        user_target = os.environ.get('OROCOS_TARGET')
        if user_target:
            return user_target
        return 'gnulinux'

    @orocos_target.setter
    def orocos_target(self, value):
        self._orocos_target = value

    @property
    def orogen_file(self):
        """Name of the specification file, relative to srcdir.

        None while the package isn't checked out.
        """
        if self._orogen_file is not None:
            return self._orogen_file
        if not os.path.isdir(self.srcdir):
            return None
        for path in sorted(glob.glob(pjoin(glob.escape(self.srcdir), '*.orogen'))):
            return os.path.basename(path)
        raise ConfigError(f"cannot find an oroGen specification file in {self.srcdir}")

    @orogen_file.setter
    def orogen_file(self, value):
        self._orogen_file = value

    @property
    def genstamp(self):
        return pjoin(self.srcdir, '.orogen', 'orogen-stamp')

    @property
    def orogen_tool_path(self):
        if self._orogen_tool_path is None:
            paths = self.environment.get('PATH')
            try:
                self._orogen_tool_path = find_binary('orogen', paths=paths)
            except CommandNotFound as e:
                raise GenerationError(
                    self, f"cannot find 'orogen' in {os.pathsep.join(paths)}") from e
        return self._orogen_tool_path

    @property
    def orogen_root(self):
        root = os.path.dirname(os.path.dirname(self.orogen_tool_path))
        if os.path.isdir(pjoin(root, 'lib', 'orogen')):
            return root
        return None

    @property
    def orogen_version(self):
        """Version of the orogen tool, as a string."""
        if self._orogen_version is None:
            root = self.orogen_root
            if root is None:
                return None
            try:
                with open(pjoin(root, 'lib', 'orogen', 'version.rb')) as f:
                    for line in f:
                        m = _version_re.search(line)
                        if m is not None:
                            self._orogen_version = m.group(1)
                            break
            except FileNotFoundError:
                return None
        return self._orogen_version

    def update_environment(self):
        self.environment.update_for_prefix(self.prefix)
        self.environment.add_path(
            'TYPELIB_RUBY_PLUGIN_PATH', pjoin(self.prefix, 'share', 'typelib', 'ruby'))

    def prepare_for_forced_build(self):
        unlink_if_exists(self.genstamp)

    def cmdline(self):
        """Return the sorted generator command line, specification file last."""
        flags = []
        if self.corba:
            flags.append('--corba')

        if self.extended_states is not None:
            flags.append('--extended-states' if self.extended_states else '--no-extended-states')

        version = self.orogen_version
        if version is None:
            raise GenerationError(self, "cannot determine the orogen version")
        # plain string comparisons, "1.10" sorts before "1.9"
        if version >= "1.0":
            flags.append(f"--parallel-build={self.build_config.parallel_build_level}")
        if version >= "1.1":
            flags.append(f"--type-export-policy={self.default_type_export_policy}")
            flags.append(f"--transports={','.join(sorted(set(self.transports)))}")

        return build_cmdline(
            flags, self.orogen_file, type(self).orogen_options, self.orogen_options)

    def generation_uptodate(self):
        if not os.path.isfile(self.genstamp):
            return True
        return makefile_uptodate_check(
            self, self.builddir, config=self.build_config, env=self.environment.export())

    def _generate(self, cmdline):
        command = [spawn.find_tool(self.build_config, 'ruby'), '-S', self.orogen_tool_path, *cmdline]
        self.progress("generating oroGen %s")
        spawn.run(
            self, 'generate', command, cwd=self.srcdir, env=self.environment.export())

    @decorate_build_method("generate")
    def regen(self):
        """Run oroGen if needed.

        :return: True if the code was regenerated
        """
        force = self.always_regenerate
        if force is None:
            force = self.build_config.always_regenerate
        tracker = GenerationTracker(self.genstamp, self.generation_uptodate)
        cmdline = self.cmdline()
        return tracker.decide(self, cmdline, self._generate, force=force)

    def prepare(self, dependency_stamps=()):
        """Regenerate if the stamp is older than the dependencies or sources.

        :param dependency_stamps: install stamps of the dependencies
        :return: True if the code was regenerated
        """
        if not stamp_outdated(self.genstamp, dependency_stamps, self.srcdir,
                              exclude=_source_excludes + (self.builddir,)):
            return False
        return self.regen()
