__all__ = ("GitImporter",)

from .. import spawn
from ..config.hint import ConfigHint
from ..exceptions import ConfigError, VcsCommandFailed
from .base import Importer, ImportStatus, Status


class GitImporter(Importer):
    """Import sources from a git repository.

    :param repository: URL or path of the repository; ``git+`` prefixed
        URLs have the prefix stripped
    :param branch: branch to track, the remote's default branch if None
    """

    srcbuild_config_type = ConfigHint(
        types={"repository": "str", "branch": "str", "patches": "list"},
        required=("repository",),
        typename="importer",
    )

    tool_name = "git"

    def __init__(self, repository, branch=None, **kwargs):
        super().__init__(**kwargs)
        self.repository = self.parse_uri(repository)
        self.branch = branch
        self.options.update(repository=self.repository, branch=branch)
        self._binary = None

    @staticmethod
    def parse_uri(raw_uri):
        if raw_uri.startswith("git+"):
            if raw_uri.startswith("git+:"):
                raise ConfigError(
                    f"need to specify the sub protocol if using git+: {raw_uri!r}")
            return raw_uri[4:]
        return raw_uri

    @property
    def binary(self):
        if self._binary is None:
            self._binary = spawn.find_tool(self.config, self.tool_name)
        return self._binary

    def _git(self, package, phase, *args, cwd=None):
        return spawn.run(
            package, phase, [self.binary, *args], cwd=cwd, error_cls=VcsCommandFailed)

    def _git_output(self, package, phase, *args):
        return spawn.run_get_output(
            package, phase, [self.binary, *args], cwd=package.srcdir,
            error_cls=VcsCommandFailed)

    def _fetch(self, package, phase):
        args = ["fetch", self.repository]
        if self.branch is not None:
            args.append(self.branch)
        self._git(package, phase, *args, cwd=package.srcdir)

    def checkout(self, package):
        command = ["clone"]
        if self.branch is not None:
            command.extend(["--branch", self.branch])
        command.extend([self.repository, package.srcdir])
        self._git(package, "checkout", *command)

    def update(self, package):
        self._fetch(package, "update")
        self._git(package, "update", "merge", "--ff-only", "FETCH_HEAD", cwd=package.srcdir)

    def status(self, package):
        self._fetch(package, "status")
        remote = self._git_output(package, "status", "rev-list", "--oneline", "HEAD..FETCH_HEAD")
        local = self._git_output(package, "status", "rev-list", "--oneline", "FETCH_HEAD..HEAD")
        dirty = self._git_output(package, "status", "status", "--porcelain", "--untracked-files=no")

        if remote and local:
            state = ImportStatus.NEEDS_MERGE
        elif remote:
            state = ImportStatus.SIMPLE_UPDATE
        elif local:
            state = ImportStatus.ADVANCED
        else:
            state = ImportStatus.UP_TO_DATE
        return Status(
            state, uncommitted_code=any(dirty),
            remote_commits=remote, local_commits=local)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.repository!r} branch={self.branch!r} @{id(self):#8x}>"
