from unittest import mock

import pytest

from srcbuild import const
from srcbuild.config import BuildConfig
from srcbuild.exceptions import ImportFailure, PatchFailed
from srcbuild.importer.patches import PatchSynchronizer, read_patch_stamp, write_patch_stamp


class FakePatch:
    """Stand-in for the patch binary recording (action, path) calls."""

    def __init__(self, fail=()):
        self.calls = []
        self.fail = set(fail)

    def __call__(self, command, **kwargs):
        action = 'unapply' if '-R' in command else 'apply'
        path = command[command.index('-i') + 1]
        self.calls.append((action, path))
        self.cwd = kwargs.get('cwd')
        if (action, path) in self.fail:
            return 1
        return 0


@pytest.fixture
def package(make_package, tmp_path):
    pkg = make_package()
    (tmp_path / pkg.name).mkdir()
    return pkg


@pytest.fixture
def synchronizer(build_config):
    build_config.tools['patch'] = '/usr/bin/patch'
    return PatchSynchronizer(build_config)


def stamp_of(package):
    return read_patch_stamp(f"{package.srcdir}/{const.PATCHES_STAMP}")


class TestPatchStamp:

    @pytest.mark.parametrize('patches', [
        [],
        ['a.patch'],
        ['/abs/a.patch', 'rel/b.patch', 'c with spaces.patch'],
    ])
    def test_round_trip(self, tmp_path, patches):
        path = str(tmp_path / 'stamp')
        write_patch_stamp(path, patches)
        assert read_patch_stamp(path) == patches

    def test_missing(self, tmp_path):
        assert read_patch_stamp(str(tmp_path / 'stamp')) == []

    def test_newline_terminated(self, tmp_path):
        path = tmp_path / 'stamp'
        path.write_text('a.patch\nb.patch\n')
        assert read_patch_stamp(str(path)) == ['a.patch', 'b.patch']

    def test_format(self, tmp_path):
        path = tmp_path / 'stamp'
        write_patch_stamp(str(path), ['a', 'b'])
        assert path.read_text() == 'a\nb'


@mock.patch('snakeoil.process.spawn.spawn')
class TestPatchSynchronizer:

    def test_nothing_to_do(self, spawn, synchronizer, package):
        assert not synchronizer.sync(package, [])
        assert not spawn.called

    def test_already_applied(self, spawn, synchronizer, package):
        write_patch_stamp(synchronizer.stamp_path(package), ['A', 'B'])
        assert not synchronizer.sync(package, ['A', 'B'])
        assert not spawn.called
        assert stamp_of(package) == ['A', 'B']

    def test_newline_terminated_stamp(self, spawn, synchronizer, package):
        with open(synchronizer.stamp_path(package), 'w') as f:
            f.write('a.patch\nb.patch\n')
        spawn.side_effect = fake = FakePatch()
        assert not synchronizer.sync(package, ['a.patch', 'b.patch'])
        assert fake.calls == []

    def test_fresh_apply(self, spawn, synchronizer, package, observer):
        spawn.side_effect = fake = FakePatch()
        assert synchronizer.sync(package, ['A', 'B'])
        assert fake.calls == [('apply', 'A'), ('apply', 'B')]
        assert fake.cwd == package.srcdir
        assert stamp_of(package) == ['A', 'B']
        assert ('info', 'patching pkg') in observer.messages

    def test_command(self, spawn, synchronizer, package, build_config):
        build_config.tools['patch'] = '/usr/bin/gpatch'
        spawn.return_value = 0
        synchronizer.sync(package, ['A'])
        assert spawn.call_args[0][0] == ['/usr/bin/gpatch', '-p0', '-i', 'A']
        write_patch_stamp(synchronizer.stamp_path(package), ['A'])
        synchronizer.sync(package, [])
        assert spawn.call_args[0][0] == ['/usr/bin/gpatch', '-p0', '-R', '-i', 'A']

    def test_reorders_by_unwinding(self, spawn, synchronizer, package):
        write_patch_stamp(synchronizer.stamp_path(package), ['A', 'B'])
        spawn.side_effect = fake = FakePatch()
        assert synchronizer.sync(package, ['B', 'C'])
        assert fake.calls == [
            ('unapply', 'B'), ('unapply', 'A'),
            ('apply', 'B'), ('apply', 'C'),
        ]
        assert stamp_of(package) == ['B', 'C']

    def test_remove_all(self, spawn, synchronizer, package, observer):
        write_patch_stamp(synchronizer.stamp_path(package), ['A', 'B'])
        spawn.side_effect = fake = FakePatch()
        assert synchronizer.sync(package, [])
        assert fake.calls == [('unapply', 'B'), ('unapply', 'A')]
        assert stamp_of(package) == []
        # nothing gets patched, so nothing is reported
        assert observer.messages == []

    def test_apply_failure_records_partial_stack(self, spawn, synchronizer, package):
        write_patch_stamp(synchronizer.stamp_path(package), ['A', 'B'])
        spawn.side_effect = fake = FakePatch(fail={('apply', 'C')})
        with pytest.raises(PatchFailed) as excinfo:
            synchronizer.sync(package, ['B', 'C'])
        assert fake.calls[-1] == ('apply', 'C')
        assert stamp_of(package) == ['B']
        e = excinfo.value
        assert isinstance(e, ImportFailure)
        assert e.phase == 'patch'
        assert e.path == 'C'
        assert e.exitcode == 1
        assert not e.reverse
        assert str(e) == "pkg: patch: applying 'C' failed with exit status 1"

    def test_unapply_failure_records_partial_stack(self, spawn, synchronizer, package):
        write_patch_stamp(synchronizer.stamp_path(package), ['A', 'B'])
        spawn.side_effect = fake = FakePatch(fail={('unapply', 'A')})
        with pytest.raises(PatchFailed) as excinfo:
            synchronizer.sync(package, ['C'])
        assert fake.calls == [('unapply', 'B'), ('unapply', 'A')]
        assert excinfo.value.reverse
        assert stamp_of(package) == ['A']

    def test_retry_after_failure(self, spawn, synchronizer, package):
        spawn.side_effect = FakePatch(fail={('apply', 'B')})
        with pytest.raises(PatchFailed):
            synchronizer.sync(package, ['A', 'B'])
        assert stamp_of(package) == ['A']
        spawn.side_effect = fake = FakePatch()
        synchronizer.sync(package, ['A', 'B'])
        assert fake.calls == [('unapply', 'A'), ('apply', 'A'), ('apply', 'B')]
        assert stamp_of(package) == ['A', 'B']


@pytest.mark.requires_binary('patch')
def test_real_patch(package, tmp_path):
    synchronizer = PatchSynchronizer(BuildConfig())
    src = tmp_path / package.name
    (src / 'hello.txt').write_text('hello\n')
    patch = tmp_path / 'world.patch'
    patch.write_text(
        '--- hello.txt\n'
        '+++ hello.txt\n'
        '@@ -1 +1 @@\n'
        '-hello\n'
        '+hello world\n'
    )
    synchronizer.sync(package, [str(patch)])
    assert (src / 'hello.txt').read_text() == 'hello world\n'
    synchronizer.sync(package, [])
    assert (src / 'hello.txt').read_text() == 'hello\n'
    assert stamp_of(package) == []
