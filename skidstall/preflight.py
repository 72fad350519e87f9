"""
Startup checks that must pass before any package is resolved
"""

import shutil
from skidstall.sources.base import run_command


class PrivilegeError(Exception):
    """Raised when the privilege-escalation wrapper is missing or refused"""
    pass


def ensure_privileges(command: str = 'sudo', timeout: float = 120):
    """
    Verify that installs against the Primary source can be elevated

    Raises:
        PrivilegeError: if the wrapper is not installed or credentials are refused
    """
    if shutil.which(command) is None:
        raise PrivilegeError(f"{command} is required. Install it first.")

    # Prompts on the terminal, output is captured
    result = run_command([command, '-v'], timeout=timeout)
    if not result.ok:
        raise PrivilegeError(f"{command} access required. Add your user to the wheel group.")
