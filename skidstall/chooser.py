"""
Operator prompts for skidstall
"""

from typing import Callable, Optional, Sequence
from skidstall.models import CandidateAlternative


class InteractiveChooser:
    """Lets an operator (or a fixed policy) pick one alternative

    choose() returns a 0-based index into the candidates, or None to skip.
    """

    def __init__(self, unattended: bool = False, auto_substitute: bool = False,
                 input_func: Callable[[str], str] = input,
                 output: Callable[[str], None] = print):
        self.unattended = unattended
        self.auto_substitute = auto_substitute
        self._input = input_func
        self._output = output

    def _read(self, prompt: str) -> str:
        try:
            return self._input(prompt)
        except EOFError:
            return ""

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question; anything but y/yes is no"""
        if self.unattended:
            return False
        answer = self._read(f"{prompt} [y/N]: ").strip().lower()
        return answer in ('y', 'yes')

    def choose(self, candidates: Sequence[CandidateAlternative],
               requested: str = "") -> Optional[int]:
        if not candidates:
            return None

        if self.unattended:
            return 0 if self.auto_substitute else None

        header = f"Alternatives for {requested}:" if requested else "Alternatives:"
        self._output(header)
        for number, candidate in enumerate(candidates, start=1):
            self._output(f"  {number}) {candidate.name} ({candidate.source.value})")

        raw = self._read(f"Select package to install (1-{len(candidates)}, 0 to skip): ").strip()

        # Non-numeric or out-of-range input is a skip, not a re-prompt
        try:
            choice = int(raw)
        except ValueError:
            return None
        if choice < 1 or choice > len(candidates):
            return None
        return choice - 1
