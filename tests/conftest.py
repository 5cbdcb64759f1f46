import os
import subprocess

import pytest
from snakeoil.osutils import pjoin

from srcbuild import config as srcbuild_config
from srcbuild.environment import EnvironmentStore
from srcbuild.importer.fallback import FallbackRegistry
from srcbuild.package import Package


class RecordingObserver:
    """Observer keeping every message it was handed."""

    def __init__(self):
        self.messages = []
        self.phases = []

    def _record(self, level, msg, *args):
        self.messages.append((level, msg % args if args else msg))

    def info(self, msg, *args):
        self._record('info', msg, *args)

    def warn(self, msg, *args):
        self._record('warn', msg, *args)

    def error(self, msg, *args):
        self._record('error', msg, *args)

    def debug(self, msg, *args):
        self._record('debug', msg, *args)

    def write(self, msg, *args):
        self._record('write', msg, *args)

    def flush(self):
        pass

    def phase_start(self, phase):
        self.phases.append(('start', phase))

    def phase_end(self, phase, status):
        self.phases.append(('end', phase, status))


class GitRepo:
    """Class for creating/manipulating git repos.

    Only relies on the git binary existing in order to limit
    dependency requirements.
    """

    def __init__(self, path, branch='main'):
        self.path = path
        self.run(['git', 'init', '-b', branch, self.path], cwd=None)
        self.run(['git', 'config', 'user.email', 'first.last@email.com'])
        self.run(['git', 'config', 'user.name', 'First Last'])

    def run(self, cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, cwd=False, **kwargs):
        if cwd is False:
            cwd = self.path
        return subprocess.run(
            cmd, cwd=cwd, encoding='utf8', check=True,
            stdout=stdout, stderr=stderr, **kwargs)

    @property
    def HEAD(self):
        """Return the commit hash for git HEAD."""
        p = self.run(['git', 'rev-parse', 'HEAD'], stdout=subprocess.PIPE)
        return p.stdout.strip()

    def add(self, file_path, content='', msg='commit'):
        """Write a file and commit it to the repo."""
        with open(pjoin(self.path, file_path), 'w') as f:
            f.write(content)
        self.run(['git', 'add', file_path])
        self.run(['git', 'commit', '-m', msg])

    def __str__(self):
        return self.path


@pytest.fixture
def build_config():
    cfg = srcbuild_config.BuildConfig(parallel_build_level=4)
    previous = srcbuild_config.set_default_config(cfg)
    yield cfg
    srcbuild_config.set_default_config(previous)


@pytest.fixture
def registry():
    return FallbackRegistry()


@pytest.fixture
def environ():
    return {}


@pytest.fixture
def env_store(environ):
    return EnvironmentStore(environ=environ, sys_path=[])


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def make_package(tmp_path, observer):
    def _make_package(name='pkg', srcdir=None, **kwargs):
        if srcdir is None:
            srcdir = str(tmp_path / name)
        kwargs.setdefault('observer', observer)
        return Package(name, srcdir, str(tmp_path / 'install'), **kwargs)
    return _make_package


@pytest.fixture
def git_repo(tmp_path):
    return GitRepo(str(tmp_path / 'upstream'))


def pytest_collection_modifyitems(config, items):
    # tests needing real binaries are skipped when they're missing
    for item in items:
        for marker in item.iter_markers(name='requires_binary'):
            binary = marker.args[0]
            if not any(os.access(pjoin(p, binary), os.X_OK)
                       for p in os.environ.get('PATH', '').split(os.pathsep) if p):
                item.add_marker(pytest.mark.skip(reason=f'{binary} not available'))


def pytest_configure(config):
    config.addinivalue_line(
        'markers', 'requires_binary(name): skip unless the named binary is on PATH')
