"""
Shared fixtures: in-memory package sources and a quiet logger
"""

import pytest
from skidstall.chooser import InteractiveChooser
from skidstall.config import EngineConfig
from skidstall.engine import ResolutionEngine
from skidstall.logger import configure_logger
from skidstall.models import CommandResult, SourceKind
from skidstall.rate_limiter import configure_limiter
from skidstall.registry import SourceRegistry
from skidstall.sources.base import PackageSource


class FakeSource(PackageSource):
    """Package source backed by sets, recording every call"""

    def __init__(self, kind, available=(), installed=(), search_results=None,
                 failing=(), phantom=(), helper_ok=True):
        super().__init__()
        self.kind = kind
        self.available = set(available)
        self.installed = set(installed)
        self.search_results = search_results or {}
        self.failing = set(failing)
        self.phantom = set(phantom)  # install reports success but nothing lands
        self.helper_ok = helper_ok
        self.exists_calls = []
        self.search_calls = []
        self.install_calls = []

    def ensure_ready(self):
        if not self.is_available():
            return False
        if not self.helper_ok:
            self.disable("helper bootstrap failed")
            return False
        return True

    def exists(self, name):
        self.exists_calls.append(name)
        return self.is_available() and name in self.available

    def search(self, term):
        self.search_calls.append(term)
        return list(self.search_results.get(term, []))

    def install(self, names):
        self.install_calls.append(list(names))
        if not self.ensure_ready():
            return CommandResult(ok=False, stderr="helper unavailable")

        bad = [name for name in names if name in self.failing or name not in self.available]
        for name in names:
            if name not in bad and name not in self.phantom:
                self.installed.add(name)
        if bad:
            return CommandResult(ok=False, returncode=1, stderr=f"target not found: {bad[0]}")
        return CommandResult(ok=True, returncode=0)

    def is_installed(self, name):
        return name in self.installed


class ScriptedInput:
    """Feeds canned answers to prompts; EOF once exhausted"""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def relaxed_aur_limiter():
    configure_limiter('aur', max_requests=10000, time_window=60)
    yield
    configure_limiter('aur', max_requests=30, time_window=60)


@pytest.fixture
def logger(tmp_path):
    return configure_logger(log_dir=str(tmp_path), log_file="run.log", console=False)


@pytest.fixture
def make_source():
    def factory(kind=SourceKind.PRIMARY, **kwargs):
        return FakeSource(kind, **kwargs)
    return factory


@pytest.fixture
def make_engine(logger):
    """Build an engine over two fake sources with scripted operator answers"""
    def factory(primary=None, community=None, answers=(), **config_kwargs):
        primary = primary or FakeSource(SourceKind.PRIMARY)
        community = community or FakeSource(SourceKind.COMMUNITY)
        config = EngineConfig(**config_kwargs)
        scripted = ScriptedInput(answers)
        chooser = InteractiveChooser(
            unattended=config.unattended,
            auto_substitute=config.auto_substitute,
            input_func=scripted,
            output=lambda line: None,
        )
        registry = SourceRegistry(primary, community, logger=logger)
        engine = ResolutionEngine(registry, chooser=chooser, config=config, logger=logger)
        engine.scripted_input = scripted
        return engine
    return factory
