import re
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from skidstall.models import CommandResult, SourceKind


def validate_package_name(package_name: str) -> bool:
    """
    Validate an Arch package name before it reaches a command line

    Arch package names may contain lowercase alphanumerics and @ . _ + -
    and must not start with a hyphen or a dot.
    """
    if not package_name or len(package_name) > 255:
        return False

    pattern = r'[a-z0-9@_+][a-z0-9@._+-]*'
    return bool(re.fullmatch(pattern, package_name))


def run_command(args: Sequence[str], timeout: float, cwd: Optional[str] = None,
                stdin=None) -> CommandResult:
    """
    Run an external command, never raising for timeouts or missing binaries

    Returns:
        CommandResult with ok set from the exit code
    """
    try:
        result = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
            stdin=stdin,
        )
        return CommandResult(
            ok=result.returncode == 0,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
    except subprocess.TimeoutExpired:
        return CommandResult(ok=False, timed_out=True,
                             stderr=f"{args[0]} timed out after {timeout}s")
    except OSError as e:
        return CommandResult(ok=False, stderr=str(e))


class PackageSource(ABC):
    """Abstract base class for package sources"""

    kind: SourceKind

    def __init__(self):
        self._disabled_reason: Optional[str] = None

    @property
    def label(self) -> str:
        return self.kind.value

    def disable(self, reason: str):
        """Stop using this source for the rest of the run"""
        self._disabled_reason = reason

    @property
    def disabled_reason(self) -> Optional[str]:
        return self._disabled_reason

    def is_available(self) -> bool:
        """
        Check if this source can be queried

        Returns:
            True unless the source was disabled
        """
        return self._disabled_reason is None

    def ensure_ready(self) -> bool:
        """
        Make sure the tooling needed for installs is present

        Returns:
            True if installs can be attempted
        """
        return self.is_available()

    @abstractmethod
    def exists(self, name: str) -> bool:
        """
        Check whether a package name exists in this source

        Args:
            name: Exact package name

        Returns:
            True if found; timeouts and errors count as not found
        """
        pass

    @abstractmethod
    def search(self, term: str) -> List[str]:
        """
        Search the source index for names related to term

        Args:
            term: Search term

        Returns:
            Package names in the order the source reports them, de-duplicated
        """
        pass

    @abstractmethod
    def install(self, names: List[str]) -> CommandResult:
        """
        Install one or more packages

        Args:
            names: Package names to install

        Returns:
            CommandResult of the install call
        """
        pass

    @abstractmethod
    def is_installed(self, name: str) -> bool:
        """
        Check local metadata for an installed package

        Args:
            name: Package name

        Returns:
            True if installed; errors count as not installed
        """
        pass


def unique(names: List[str]) -> List[str]:
    """Drop repeated names while keeping first-seen order"""
    seen = set()
    ordered = []
    for name in names:
        if name and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered
