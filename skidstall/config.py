"""
Run configuration for the skidstall resolver
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LedgerScope(Enum):
    """How long outcomes are remembered by one engine"""
    RUN = "run"      # accumulate across every resolve() call
    BATCH = "batch"  # start empty on each resolve() call


@dataclass
class EngineConfig:
    """Timeouts, modes and log location for one run"""
    unattended: bool = False
    auto_substitute: bool = False
    ledger_scope: LedgerScope = LedgerScope.RUN

    # Seconds
    primary_exists_timeout: float = 5
    community_exists_timeout: float = 10
    primary_search_timeout: float = 30
    community_search_timeout: float = 10
    installed_check_timeout: float = 10
    install_timeout: float = 600
    bootstrap_timeout: float = 900

    community_rate_limit: int = 30
    community_rate_window: float = 60

    log_dir: Optional[str] = None
    log_file: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "EngineConfig":
        """Build a config from parsed CLI arguments"""
        return cls(
            unattended=getattr(args, 'auto', False),
            auto_substitute=getattr(args, 'auto_substitute', False),
            log_dir=getattr(args, 'log_dir', None),
        )
