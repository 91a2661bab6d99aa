from __future__ import annotations

import sys
from typing import Callable, Optional, Sequence, TextIO, TypeVar

from .errors import FormatError, NotFoundError, PromptCancelled

T = TypeVar("T")

YES = {"y", "yes"}
NO = {"n", "no"}


class Prompt:
    """Line based interactive prompts on top of ``input()``."""

    def __init__(self, input_func: Callable[[str], str] = input, output: Optional[TextIO] = None):
        self._input = input_func
        self._output = output if output is not None else sys.stderr

    def _ask(self, message: str) -> str:
        try:
            return self._input(message)
        except (EOFError, KeyboardInterrupt):
            raise PromptCancelled("Cancelled") from None

    def _say(self, message: str) -> None:
        print(message, file=self._output)

    def text(self, message: str, default: Optional[str] = None) -> str:
        suffix = f" [{default}]" if default else ""
        answer = self._ask(f"{message}{suffix} ").strip()
        if not answer and default is not None:
            return default
        return answer

    def parsed(self, message: str, parse: Callable[[str], T], default: Optional[str] = None) -> T:
        """Ask until ``parse`` accepts the answer; format errors are shown and asked again."""
        while True:
            answer = self.text(message, default)
            try:
                return parse(answer)
            except FormatError as exc:
                self._say(str(exc))

    def confirm(self, message: str, default: bool = False) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            answer = self._ask(f"{message} ({hint}) ").strip().lower()
            if not answer:
                return default
            if answer in YES:
                return True
            if answer in NO:
                return False
            self._say("Please answer y or n")

    def select(self, candidates: Sequence[str], message: str) -> str:
        if not candidates:
            raise NotFoundError("Nothing to select")
        self._say(message)
        for number, candidate in enumerate(candidates, start=1):
            self._say(f"  {number}) {candidate}")
        while True:
            answer = self._ask("> ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(candidates):
                return candidates[int(answer) - 1]
            if answer in candidates:
                return answer
            self._say(f"Enter a number between 1 and {len(candidates)}")
