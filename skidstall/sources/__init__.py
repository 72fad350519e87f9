from skidstall.sources.base import PackageSource, validate_package_name
from skidstall.sources.pacman_source import PacmanSource
from skidstall.sources.aur_source import AurSource

__all__ = ['PackageSource', 'PacmanSource', 'AurSource', 'validate_package_name']
