"""
Resolution engine for skidstall

Takes batches of requested package names, installs what can be installed
directly, and walks everything else through alternative search. Names that
cannot be settled in the first pass are deferred and offered once more by
finalize().
"""

from typing import Dict, List, Optional
from skidstall.chooser import InteractiveChooser
from skidstall.config import EngineConfig, LedgerScope
from skidstall.ledger import OutcomeLedger
from skidstall.logger import LoggerManager, get_logger
from skidstall.models import (CandidateAlternative, OutcomeKind, ResolutionOutcome,
                              ResolutionSummary, SourceKind)
from skidstall.oracle import InstalledStateOracle
from skidstall.rate_limiter import configure_limiter
from skidstall.registry import SourceRegistry
from skidstall.sources.aur_source import AurSource
from skidstall.sources.base import PackageSource, unique
from skidstall.sources.pacman_source import PacmanSource


class ResolutionEngine:
    """Drives each requested name to exactly one ledger outcome"""

    def __init__(self, registry: SourceRegistry, chooser: Optional[InteractiveChooser] = None,
                 ledger: Optional[OutcomeLedger] = None, config: Optional[EngineConfig] = None,
                 oracle: Optional[InstalledStateOracle] = None,
                 logger: Optional[LoggerManager] = None):
        self.config = config or EngineConfig()
        self.registry = registry
        self.oracle = oracle or InstalledStateOracle(registry)
        self.chooser = chooser or InteractiveChooser(
            unattended=self.config.unattended,
            auto_substitute=self.config.auto_substitute,
        )
        self.ledger = ledger if ledger is not None else OutcomeLedger()
        self.logger = logger or get_logger()
        self._optional = set()

    @classmethod
    def from_config(cls, config: EngineConfig, logger: Optional[LoggerManager] = None,
                    chooser: Optional[InteractiveChooser] = None) -> "ResolutionEngine":
        """Wire pacman and AUR sources using the config's timeouts"""
        logger = logger or get_logger()
        configure_limiter('aur', config.community_rate_limit, config.community_rate_window)

        primary = PacmanSource(
            exists_timeout=config.primary_exists_timeout,
            search_timeout=config.primary_search_timeout,
            installed_timeout=config.installed_check_timeout,
            install_timeout=config.install_timeout,
        )
        community = AurSource(
            exists_timeout=config.community_exists_timeout,
            search_timeout=config.community_search_timeout,
            installed_timeout=config.installed_check_timeout,
            install_timeout=config.install_timeout,
            bootstrap_timeout=config.bootstrap_timeout,
            logger=logger,
        )
        registry = SourceRegistry(primary, community, logger=logger)
        return cls(registry, chooser=chooser, config=config, logger=logger)

    @property
    def unattended(self) -> bool:
        return self.config.unattended

    @property
    def _defers_unattended(self) -> bool:
        return self.config.unattended and not self.config.auto_substitute

    # ==================== Batches ====================

    def resolve(self, names: List[str], source: SourceKind = SourceKind.PRIMARY,
                optional: bool = False) -> Dict[str, ResolutionOutcome]:
        """Resolve a batch of requested names

        Args:
            names: Requested package names, in caller order
            source: Source the batch targets
            optional: Non-critical names; what cannot be installed is Skipped, never Failed

        Returns:
            Current outcome for each distinct requested name
        """
        if self.config.ledger_scope == LedgerScope.BATCH:
            self.ledger.clear()
            self._optional.clear()

        requested = unique(list(names))
        fresh = []
        for name in requested:
            if name in self.ledger:
                self.logger.log_debug(f"{name} already handled this run "
                                      f"({self.ledger.get(name).kind.value})")
            else:
                fresh.append(name)

        if fresh:
            if optional:
                self._resolve_optional(fresh)
            elif source == SourceKind.COMMUNITY:
                self._resolve_community(fresh)
            else:
                self._resolve_primary(fresh)

        return {name: self.ledger.get(name) for name in requested}

    def _resolve_primary(self, names: List[str]):
        self.logger.log_success(f"Validating {len(names)} packages before installation...")

        validated = []
        missing = []
        for name in names:
            if self.oracle.is_installed(name):
                self.logger.log_info(f"  ✓ {name} (already installed)")
                self._record(name, ResolutionOutcome.already_installed())
            elif self.registry.exists(name, SourceKind.PRIMARY):
                self.logger.log_info(f"  ✓ {name} (available in repos)")
                validated.append(name)
            else:
                self.logger.log_warning(f"  ✗ {name} (not in repos or timeout)")
                missing.append(name)

        if validated:
            missing.extend(self._install_batch(validated))

        for name in missing:
            self.logger.log_warning(f"Attempting fallback search for: {name}")
            self._search_alternatives(name, retry=False)

    def _install_batch(self, names: List[str]) -> List[str]:
        """Install validated names in one call

        Returns:
            Names that did not end up installed
        """
        primary = self.registry.get(SourceKind.PRIMARY)
        self.logger.log_install_attempt(names, primary.label)
        result = primary.install(names)
        self.logger.log_command_output(f"{primary.label} -S {' '.join(names)}", result.output)

        if result.ok:
            for name in names:
                self._record(name, ResolutionOutcome.installed_direct())
            self.logger.log_success(f"Successfully installed {len(names)} packages")
            return []

        self.logger.log_warning("Some packages failed during installation")
        failed = []
        for name in names:
            if self.oracle.is_installed(name):
                self._record(name, ResolutionOutcome.installed_direct())
            else:
                self.logger.log_warning(f"  ✗ {name} failed during install")
                failed.append(name)
        return failed

    def _resolve_community(self, names: List[str]):
        community = self.registry.get(SourceKind.COMMUNITY)
        self.logger.log_success(f"Installing {len(names)} packages from {community.label}...")

        for name in names:
            if self.oracle.is_installed(name):
                self.logger.log_info(f"  ✓ {name} already installed (skipping)")
                self._record(name, ResolutionOutcome.already_installed())
                continue

            if not self.registry.exists(name, SourceKind.COMMUNITY):
                self.logger.log_warning(f"  ✗ {name} not found in {community.label}")
                self._search_alternatives(name, retry=False)
                continue

            self.logger.log_install_attempt([name], community.label)
            result = community.install([name])
            self.logger.log_command_output(f"{community.label} -S {name}", result.output)
            if not result.ok:
                self.logger.log_install_failure(name, community.label, result.output)
                self._search_alternatives(name, retry=False)
            elif self.oracle.is_installed(name):
                self.logger.log_install_success(name, community.label)
                self._record(name, ResolutionOutcome.installed_direct())
            else:
                self.logger.log_warning(f"  ✗ {name} installation reported success but package not found")
                self._record(name, ResolutionOutcome.failed("not installed after reported success"))

    def _resolve_optional(self, names: List[str]):
        """Try each non-critical name from Primary, then Community, then alternatives"""
        community = self.registry.get(SourceKind.COMMUNITY)
        self.logger.log_info(f"Installing {len(names)} optional packages (non-critical)...")

        for name in names:
            self._optional.add(name)
            if self.oracle.is_installed(name):
                self.logger.log_info(f"  ✓ {name} already installed")
                self._record(name, ResolutionOutcome.already_installed())
                continue

            if self.registry.exists(name, SourceKind.PRIMARY) and \
                    self._install_from(self.registry.get(SourceKind.PRIMARY), name):
                self._record(name, ResolutionOutcome.installed_direct())
                continue

            if community.ensure_ready():
                if self._install_from(community, name) and self.oracle.is_installed(name):
                    self._record(name, ResolutionOutcome.installed_direct())
                    continue
                self.logger.log_warning(f"  ✗ {name} unavailable from {community.label} "
                                        f"(optional, trying fallback)")
            else:
                self.logger.log_warning(f"  ✗ {name} skipped in {community.label} "
                                        f"({community.disabled_reason or 'helper not available'})")

            self._search_alternatives(name, retry=False)

    # ==================== Alternatives ====================

    def _search_alternatives(self, name: str, retry: bool):
        if not retry:
            if self._defers_unattended:
                self._defer(name, "unattended mode, deferring for post-install review")
                return
            if not self.unattended and not self.chooser.confirm(
                    f"Search AUR/alternatives for '{name}' now?"):
                self._defer(name, "skipped by operator")
                return

        candidates = self.registry.search_all(name)
        if not candidates:
            self._unresolved(name, retry, "no alternatives found")
            return

        index = self.chooser.choose(candidates, requested=name)
        if index is None:
            self._unresolved(name, retry, "no alternative selected")
            return

        selected = candidates[index]
        self.logger.log_info(f"Selected fallback: {selected.name}")
        if self._install_selected(selected):
            self._record(name, ResolutionOutcome.via_alternative(selected))
        else:
            self._record(name, ResolutionOutcome.failed(f"alternative {selected.name} not installed"))

    def _install_selected(self, selected: CandidateAlternative) -> bool:
        """Re-validate a chosen substitute and install it from whichever source has it"""
        if self.oracle.is_installed(selected.name):
            self.logger.log_info(f"  ✓ {selected.name} (already installed)")
            return True

        for kind in (SourceKind.PRIMARY, SourceKind.COMMUNITY):
            if self.registry.exists(selected.name, kind) and \
                    self._install_from(self.registry.get(kind), selected.name):
                return True

        self.logger.log_warning(f"Selected fallback {selected.name} not available")
        return False

    def _install_from(self, backend: PackageSource, name: str) -> bool:
        """Install a single name from one source"""
        self.logger.log_install_attempt([name], backend.label)
        result = backend.install([name])
        self.logger.log_command_output(f"{backend.label} -S {name}", result.output)
        if result.ok:
            self.logger.log_install_success(name, backend.label)
            return True
        self.logger.log_install_failure(name, backend.label, result.output)
        return False

    def _unresolved(self, name: str, retry: bool, reason: str):
        if retry:
            self._record(name, ResolutionOutcome.failed(reason))
        else:
            self._defer(name, reason)

    def _defer(self, name: str, reason: str):
        self.logger.log_deferred(name, reason)
        self._record(name, ResolutionOutcome.deferred(reason))

    def _record(self, name: str, outcome: ResolutionOutcome):
        if outcome.kind == OutcomeKind.FAILED and name in self._optional:
            self.logger.log_warning(f"  ✗ {name} skipped (optional): {outcome.detail}")
            outcome = ResolutionOutcome.skipped(outcome.detail)

        self.ledger.record(name, outcome)
        label = outcome.kind.value
        if outcome.selected:
            label = f"{label} ({outcome.selected.name} from {outcome.selected.source.value})"
        self.logger.log_outcome(name, label)

    # ==================== End of run ====================

    def retry_deferred(self):
        """Offer every deferred name once more, in deferral order"""
        pending = self.ledger.pending()
        if not pending:
            return

        self.logger.log_warning(
            f"The following {len(pending)} packages were not found and need your attention:"
        )
        for name in pending:
            self.logger.log_warning(f"  - {name}")

        if self._defers_unattended:
            self.logger.log_info("AUTO mode: skipping deferred package resolution")
            self.logger.log_info("Run interactively to resolve these packages")
            return

        if not self.unattended and not self.chooser.confirm(
                "Would you like to search for alternatives now?"):
            self.logger.log_info("You can install these packages later with "
                                 "pacman -S <package> or yay -S <package>")
            return

        for name in pending:
            self.logger.log_success(f"Searching alternatives for: {name}")
            self._search_alternatives(name, retry=True)

    def summary(self) -> ResolutionSummary:
        return self.ledger.summarize()

    def finalize(self) -> ResolutionSummary:
        """Run the deferred retry pass and report"""
        self.retry_deferred()
        return self.summary()
