"""
pacman backend for skidstall
Primary source: the official repositories, queried through the local sync databases
"""

from typing import List
from skidstall.models import CommandResult, SourceKind
from skidstall.sources.base import PackageSource, run_command, unique, validate_package_name


class PacmanSource(PackageSource):
    """Primary source backed by pacman"""

    kind = SourceKind.PRIMARY

    def __init__(self, exists_timeout: float = 5, search_timeout: float = 30,
                 installed_timeout: float = 10, install_timeout: float = 600,
                 privilege_command: str = 'sudo'):
        super().__init__()
        self.exists_timeout = exists_timeout
        self.search_timeout = search_timeout
        self.installed_timeout = installed_timeout
        self.install_timeout = install_timeout
        self.privilege_command = privilege_command

    def exists(self, name: str) -> bool:
        """Check the sync databases with pacman -Si"""
        if not self.is_available() or not validate_package_name(name):
            return False

        return run_command(['pacman', '-Si', name], timeout=self.exists_timeout).ok

    def search(self, term: str) -> List[str]:
        """Search the sync databases with pacman -Ss

        Output comes in pairs of lines:
            extra/htop 3.3.0-1 [installed]
                Interactive process viewer
        Only the unindented lines carry a repo/name token.
        """
        if not self.is_available() or not validate_package_name(term):
            return []

        result = run_command(['pacman', '-Ss', term], timeout=self.search_timeout)
        if not result.ok:
            return []

        names = []
        for line in result.stdout.splitlines():
            if not line or line[0].isspace() or '/' not in line:
                continue
            token = line.split()[0]
            names.append(token.split('/', 1)[1])

        return unique(names)

    def install(self, names: List[str]) -> CommandResult:
        """Install packages in one pacman transaction"""
        invalid = [name for name in names if not validate_package_name(name)]
        if invalid:
            return CommandResult(ok=False, stderr=f"Invalid package name: {', '.join(invalid)}")
        if not names:
            return CommandResult(ok=True)

        return run_command(
            [self.privilege_command, 'pacman', '-S', '--noconfirm', '--needed'] + list(names),
            timeout=self.install_timeout,
        )

    def is_installed(self, name: str) -> bool:
        """Query the local database with pacman -Qi"""
        if not validate_package_name(name):
            return False

        return run_command(['pacman', '-Qi', name], timeout=self.installed_timeout).ok
