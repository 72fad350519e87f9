"""
Logging for the skidstall package resolver
Mirrors operator progress lines to an append-only run log
"""

import logging
import os
import tempfile
from typing import List, Optional


class LoggerManager:
    """Manages the run log and console progress output"""

    def __init__(self, log_dir: Optional[str] = None, log_file: Optional[str] = None,
                 console: bool = True):
        """Initialize logger with file and console handlers"""
        self.log_dir = log_dir or tempfile.gettempdir()
        self.log_file = log_file or f"skidstall-{os.getpid()}.log"
        self.log_path = os.path.join(self.log_dir, self.log_file)

        os.makedirs(self.log_dir, exist_ok=True)

        self.logger = logging.getLogger("skidstall")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # A fresh manager owns the named logger; drop handlers of a previous one
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        # File handler (the run log)
        file_handler = logging.FileHandler(self.log_path)
        file_handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

    def log_info(self, message: str):
        """Log info message"""
        self.logger.info(f"[i] {message}")

    def log_warning(self, message: str):
        """Log warning message"""
        self.logger.warning(f"[!] {message}")

    def log_error(self, message: str, error: Optional[Exception] = None):
        """Log error message with optional exception details"""
        if error:
            self.logger.error(f"[✗] {message}: {str(error)}", exc_info=True)
        else:
            self.logger.error(f"[✗] {message}")

    def log_debug(self, message: str):
        """Log debug message"""
        self.logger.debug(message)

    def log_success(self, message: str):
        """Log success message"""
        self.logger.info(f"[+] {message}")

    # ==================== Installation Logging ====================

    def log_install_attempt(self, package_names: List[str], source: str):
        """Log installation attempt"""
        self.log_info(f"Installing {len(package_names)} package(s) from {source}: "
                      f"{' '.join(package_names)}")

    def log_install_success(self, package_name: str, source: str):
        """Log successful installation"""
        self.log_success(f"{package_name} installed from {source}")

    def log_install_failure(self, package_name: str, source: str, error: str):
        """Log installation failure"""
        self.log_warning(f"Failed to install {package_name} from {source}")
        if error:
            self.log_debug(f"{source} output for {package_name}:\n{error}")

    def log_command_output(self, command: str, output: str):
        """Record full command output in the run log only"""
        if output:
            self.log_debug(f"$ {command}\n{output}")

    # ==================== Search Logging ====================

    def log_search(self, query: str, repositories: list):
        """Log search operation"""
        repos_str = ", ".join(repositories)
        self.log_info(f"Searching for '{query}' in: {repos_str}")

    def log_search_results(self, query: str, results_count: int):
        """Log search results"""
        if results_count:
            self.log_info(f"Found {results_count} alternatives for {query}")
        else:
            self.log_warning(f"No alternatives found for {query}")

    # ==================== Resolution Logging ====================

    def log_deferred(self, package_name: str, reason: str):
        """Log a package being deferred for later review"""
        self.log_warning(f"Deferring {package_name}: {reason}")

    def log_outcome(self, package_name: str, outcome: str):
        """Record a package's final disposition in the run log"""
        self.log_debug(f"Outcome {package_name} -> {outcome}")

    # ==================== System Status Logging ====================

    def log_system_warning(self, message: str):
        """Log system warning"""
        self.log_warning(message)

    def get_log_file_path(self) -> str:
        """Get the path to the log file"""
        return self.log_path


# Global logger instance
_logger_instance = None


def get_logger() -> LoggerManager:
    """Get or create the global logger instance"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = LoggerManager()
    return _logger_instance


def configure_logger(log_dir: Optional[str] = None, log_file: Optional[str] = None,
                     console: bool = True) -> LoggerManager:
    """Replace the global logger instance, e.g. to honour --log-dir"""
    global _logger_instance
    _logger_instance = LoggerManager(log_dir=log_dir, log_file=log_file, console=console)
    return _logger_instance
