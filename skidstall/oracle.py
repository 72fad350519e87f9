"""
Installed-state checks for skidstall
"""

from skidstall.registry import SourceRegistry
from skidstall.models import SourceKind


class InstalledStateOracle:
    """Answers whether a package is already present on the system

    Both sources' local records are consulted. Any error in an underlying
    query reads as "not installed".
    """

    def __init__(self, registry: SourceRegistry):
        self.registry = registry

    def is_installed(self, name: str) -> bool:
        for kind in (SourceKind.PRIMARY, SourceKind.COMMUNITY):
            if self.registry.get(kind).is_installed(name):
                return True
        return False
