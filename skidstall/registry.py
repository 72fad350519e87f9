"""
Source registry for skidstall
Single entry point for existence checks and searches across both sources
"""

from typing import Dict, List, Optional, Sequence
from skidstall.logger import LoggerManager, get_logger
from skidstall.models import CandidateAlternative, ExistenceResult, SourceKind
from skidstall.sources.base import PackageSource


class SourceRegistry:
    """Routes queries to the Primary and Community sources"""

    def __init__(self, primary: PackageSource, community: PackageSource,
                 logger: Optional[LoggerManager] = None):
        self.sources: Dict[SourceKind, PackageSource] = {
            SourceKind.PRIMARY: primary,
            SourceKind.COMMUNITY: community,
        }
        self.logger = logger or get_logger()

    def get(self, source: SourceKind) -> PackageSource:
        return self.sources[source]

    def check(self, name: str, source: SourceKind) -> ExistenceResult:
        """Run a fresh existence query; nothing is cached between calls"""
        backend = self.sources[source]
        found = backend.is_available() and backend.exists(name)
        return ExistenceResult(name=name, source=source, exists=found)

    def exists(self, name: str, source: SourceKind) -> bool:
        return self.check(name, source).exists

    def search(self, term: str, source: SourceKind) -> List[str]:
        backend = self.sources[source]
        if not backend.is_available():
            return []
        return backend.search(term)

    def search_all(self, term: str, exclude_term: bool = True,
                   sources: Sequence[SourceKind] = (SourceKind.PRIMARY, SourceKind.COMMUNITY)
                   ) -> List[CandidateAlternative]:
        """Primary hits first, then Community hits, each in source order

        Names are not de-duplicated across sources. With exclude_term the
        term itself is dropped since it cannot be its own substitute.
        """
        labels = [self.sources[kind].label for kind in sources if self.sources[kind].is_available()]
        self.logger.log_search(term, labels)

        candidates = []
        for kind in sources:
            for name in self.search(term, kind):
                if not (exclude_term and name == term):
                    candidates.append(CandidateAlternative(name=name, source=kind))

        self.logger.log_search_results(term, len(candidates))
        return candidates
