"""
AUR backend for skidstall
Community source: AUR RPC for lookups, the yay helper for installs
"""

import os
import shutil
import tempfile
from typing import Dict, List, Optional

import requests

from skidstall.logger import LoggerManager, get_logger
from skidstall.models import CommandResult, SourceKind
from skidstall.rate_limiter import rate_limit
from skidstall.sources.base import PackageSource, run_command, unique, validate_package_name

AUR_RPC_URL = "https://aur.archlinux.org/rpc/"
HELPER_REPO_URL = "https://aur.archlinux.org/yay.git"


class AurSource(PackageSource):
    """Community source backed by the AUR"""

    kind = SourceKind.COMMUNITY

    def __init__(self, helper: str = 'yay', exists_timeout: float = 10,
                 search_timeout: float = 10, installed_timeout: float = 10,
                 install_timeout: float = 600, bootstrap_timeout: float = 900,
                 logger: Optional[LoggerManager] = None):
        super().__init__()
        self.helper = helper
        self.exists_timeout = exists_timeout
        self.search_timeout = search_timeout
        self.installed_timeout = installed_timeout
        self.install_timeout = install_timeout
        self.bootstrap_timeout = bootstrap_timeout
        self.logger = logger or get_logger()
        self._bootstrap_attempted = False

    # ==================== RPC ====================

    @rate_limit('aur')
    def _rpc(self, params: Dict[str, str], timeout: float) -> Optional[Dict]:
        """Query the AUR RPC v5 interface

        Returns:
            Decoded JSON body, or None on any network or decoding failure
        """
        try:
            response = requests.get(AUR_RPC_URL, params=dict(params, v='5'), timeout=timeout)
            if response.status_code != 200:
                self.logger.log_debug(f"AUR RPC returned HTTP {response.status_code}")
                return None
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.log_debug(f"AUR RPC query failed: {e}")
            return None

        if data.get('type') == 'error':
            self.logger.log_debug(f"AUR RPC error: {data.get('error')}")
            return None
        return data

    def exists(self, name: str) -> bool:
        """Exact-name lookup via the RPC info call"""
        if not self.is_available() or not validate_package_name(name):
            return False

        data = self._rpc({'type': 'info', 'arg': name}, timeout=self.exists_timeout)
        return bool(data) and data.get('resultcount') == 1

    def search(self, term: str) -> List[str]:
        """Name/description search via the RPC search call"""
        if not self.is_available() or not validate_package_name(term):
            return []

        data = self._rpc({'type': 'search', 'arg': term}, timeout=self.search_timeout)
        if not data:
            return []

        return unique([hit.get('Name', '') for hit in data.get('results', [])])

    # ==================== Helper ====================

    def helper_present(self) -> bool:
        return shutil.which(self.helper) is not None

    def ensure_ready(self) -> bool:
        """Bootstrap the helper once; disable the source if that fails"""
        if not self.is_available():
            return False
        if self.helper_present():
            return True
        if self._bootstrap_attempted:
            return False

        self._bootstrap_attempted = True
        if self.bootstrap_helper():
            return True

        self.disable(f"{self.helper} could not be installed")
        self.logger.log_system_warning(
            f"{self.helper} not available; AUR packages will be skipped for this run"
        )
        return False

    def bootstrap_helper(self) -> bool:
        """Clone and build the helper from the AUR

        Returns:
            True if the helper is on PATH afterwards
        """
        self.logger.log_info(f"Installing {self.helper} AUR helper...")
        workdir = tempfile.mkdtemp(prefix=f"{self.helper}-install-")
        try:
            clone_dir = os.path.join(workdir, self.helper)
            result = run_command(['git', 'clone', '--depth=1', HELPER_REPO_URL, clone_dir],
                                 timeout=self.bootstrap_timeout)
            self.logger.log_command_output('git clone', result.output)
            if not result.ok:
                self.logger.log_error(f"Failed to clone {self.helper} repository")
                return False

            self.logger.log_info(f"Building {self.helper}...")
            result = run_command(['makepkg', '-si', '--noconfirm'],
                                 timeout=self.bootstrap_timeout, cwd=clone_dir)
            self.logger.log_command_output('makepkg -si', result.output)
            if not result.ok:
                self.logger.log_error(f"Failed to build {self.helper}")
                return False
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

        if not self.helper_present():
            self.logger.log_error(f"{self.helper} built but not found on PATH")
            return False

        self.logger.log_success(f"{self.helper} installed successfully")
        return True

    # ==================== Install / query ====================

    def install(self, names: List[str]) -> CommandResult:
        """Install packages one at a time through the helper"""
        invalid = [name for name in names if not validate_package_name(name)]
        if invalid:
            return CommandResult(ok=False, stderr=f"Invalid package name: {', '.join(invalid)}")
        if not self.ensure_ready():
            return CommandResult(ok=False, stderr=self.disabled_reason or f"{self.helper} unavailable")

        outputs = []
        for name in names:
            result = run_command([self.helper, '-S', '--noconfirm', '--needed', name],
                                 timeout=self.install_timeout)
            outputs.append(result.output)
            if not result.ok:
                return CommandResult(ok=False, returncode=result.returncode,
                                     stdout="\n".join(outputs), timed_out=result.timed_out)

        return CommandResult(ok=True, returncode=0, stdout="\n".join(outputs))

    def is_installed(self, name: str) -> bool:
        """Query local metadata through the helper"""
        if not validate_package_name(name) or not self.helper_present():
            return False

        return run_command([self.helper, '-Qi', name], timeout=self.installed_timeout).ok
