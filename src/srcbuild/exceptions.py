"""Base srcbuild exceptions."""

from snakeoil.cli.exceptions import UserException


class SrcbuildException(Exception):
    """Generic srcbuild exception."""


class SrcbuildUserException(SrcbuildException, UserException):
    """Generic srcbuild exception with a sane string for non-debug, user-facing output."""


class ConfigError(SrcbuildUserException):
    """Structural misconfiguration; never retried and never falls back."""


class MissingBinary(ConfigError):

    def __init__(self, binary, msg):
        self.binary = binary
        self.message = msg
        super().__init__(f"{msg}: {binary!r}")


class PackageError(SrcbuildUserException):
    """Failure of one step of a package's pipeline.

    :ivar package: the package being processed, may be None
    :ivar phase: name of the failing step (checkout, update, patch, generate...)
    """

    def __init__(self, package, phase, msg):
        super().__init__(msg)
        self.package = package
        self.phase = phase
        self.message = msg

    def __str__(self):
        name = getattr(self.package, 'name', self.package)
        if name is None:
            return f"{self.phase}: {self.message}"
        return f"{name}: {self.phase}: {self.message}"


class ImportFailure(PackageError):
    """Recognized failure while importing a source tree; triggers fallbacks."""


class ToolFailed(PackageError):
    """External process exited non-zero."""

    def __init__(self, package, phase, command, exitcode, msg=None):
        self.command = list(command)
        self.exitcode = exitcode
        if msg is None:
            msg = f"{self.command[0]!r} failed with exit status {exitcode}"
        super().__init__(package, phase, msg)


class PatchFailed(ImportFailure, ToolFailed):
    """Applying or unapplying a patch failed."""

    def __init__(self, package, path, command, exitcode, reverse=False):
        self.path = path
        self.reverse = reverse
        action = 'unapplying' if reverse else 'applying'
        ToolFailed.__init__(
            self, package, 'patch', command, exitcode,
            f"{action} {path!r} failed with exit status {exitcode}")


class GenerationError(ToolFailed):
    """Code generation failed or could not be set up."""

    def __init__(self, package, msg, command=(), exitcode=None):
        super().__init__(package, 'generate', command, exitcode, msg)


class VcsCommandFailed(ImportFailure, ToolFailed):
    """A version control command run by an importer exited non-zero."""
