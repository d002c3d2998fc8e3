"""Custom exceptions for prmap."""


class PRMapError(Exception):
    """Base exception for all prmap errors."""


class ConfigError(PRMapError):
    """Configuration-related errors."""


class InputError(PRMapError):
    """Missing arguments or an unreadable/malformed pull request list."""


class RepositoryError(PRMapError):
    """A commit, branch, merge base or diff could not be resolved."""


class RefNotFoundError(RepositoryError):
    """Raised when a local branch does not exist."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Branch '{ref}' not found in the local repository")


class GitCommandError(RepositoryError):
    """A git subprocess exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"'{' '.join(command)}' failed with exit code {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class FetchError(GitCommandError):
    """Fetching a pull request branch failed."""


class ReportWriteError(PRMapError):
    """The report document could not be written."""
