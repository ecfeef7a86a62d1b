# artist_conflicts.py
"""Detect artist names that differ only in letter case and resolve them.

Resolution is interactive. Each conflicting pair runs through a small state
machine::

    PROMPT --keep both / merge--> DONE
    PROMPT --enter new name--> NAME_ENTRY
    NAME_ENTRY --ok--> DONE (merge under the new name)
    NAME_ENTRY --reenter--> NAME_ENTRY
    NAME_ENTRY --dismiss--> DONE (no change)

Operator input comes from a *prompter* object so the logic can be driven by
scripted answers in tests. Nothing here touches the filesystem.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from library_model import Artist

logger = logging.getLogger(__name__)


class OperationDeclined(RuntimeError):
    """Raised when the operator answers "no" or closes the input stream."""


class PairChoice(IntEnum):
    KEEP_BOTH = 0
    MERGE_FIRST = 1
    MERGE_SECOND = 2
    NEW_NAME = 3


class NameChoice(IntEnum):
    ACCEPT = 0
    REENTER = 1
    DISMISS = 2


PAIR_OPTIONS = [
    "don't do anything",
    "merge using first",
    "merge using second",
    "enter new name",
]
NAME_OPTIONS = ["ok", "reenter name", "dismiss"]


class ResolutionState(str, Enum):
    PROMPT = "prompt"
    NAME_ENTRY = "name_entry"
    DONE = "done"


class Prompter(Protocol):
    def choose(self, message: str, options: Sequence[str]) -> int: ...

    def ask_text(self, message: str) -> str: ...

    def confirm(self, message: str) -> bool: ...


class ConsolePrompter:
    """Prompter reading answers from the terminal."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None) -> None:
        self._input = input_func or input

    def _read(self, prompt: str) -> str:
        try:
            return self._input(prompt)
        except EOFError:
            raise OperationDeclined("input closed") from None

    def choose(self, message: str, options: Sequence[str]) -> int:
        print(message)
        while True:
            for i, option in enumerate(options):
                print(f"[{i}] {option}")
            raw = self._read("> ").strip()
            try:
                index = int(raw)
            except ValueError:
                print("invalid input")
                continue
            if 0 <= index < len(options):
                return index
            print("invalid input")

    def ask_text(self, message: str) -> str:
        while True:
            print(message)
            text = self._read("> ").strip()
            if text:
                return text
            print("invalid input")

    def confirm(self, message: str) -> bool:
        while True:
            answer = self._read(f"{message} [Y/n]? ").strip().lower()
            if answer in ("", "y"):
                return True
            if answer == "n":
                return False
            print("invalid input")


class ScriptedPrompter:
    """Prompter replaying canned answers, for non-interactive runs and tests."""

    def __init__(
        self,
        choices: Iterable[int] = (),
        texts: Iterable[str] = (),
        confirmations: Iterable[bool] = (),
    ) -> None:
        self.choices = deque(choices)
        self.texts = deque(texts)
        self.confirmations = deque(confirmations)
        self.messages: List[str] = []

    def choose(self, message: str, options: Sequence[str]) -> int:
        self.messages.append(message)
        return self.choices.popleft()

    def ask_text(self, message: str) -> str:
        self.messages.append(message)
        return self.texts.popleft()

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.confirmations.popleft() if self.confirmations else True


@dataclass
class ResolutionSummary:
    merged: int = 0
    renamed: int = 0
    kept: int = 0


def find_similar_artists(artists: Sequence[Artist]) -> List[Tuple[int, int]]:
    """Return index pairs ``(i, j)``, ``i < j``, of artists named alike."""
    return [
        (i, j)
        for i in range(len(artists))
        for j in range(i + 1, len(artists))
        if artists[i].is_similar(artists[j])
    ]


def merge_artists(artists: List[Artist], keep: int, drop: int, name: str) -> Artist:
    """Fold ``artists[drop]`` into ``artists[keep]`` and call the result ``name``.

    The merged artist stays at ``keep``'s position. Any other artist already
    named exactly ``name`` is folded in too.
    """
    target = artists[keep]
    target.aliases.add(target.name)
    target.absorb(artists[drop])
    target.name = name
    del artists[drop]
    for other in artists:
        if other is not target and other.name == name:
            target.absorb(other)
    artists[:] = [a for a in artists if a is target or a.name != name]
    return target


class ConflictResolver:
    """Walk every similar-name pair through the resolution state machine."""

    def __init__(self, prompter: Prompter) -> None:
        self.prompter = prompter

    def resolve(self, artists: List[Artist]) -> ResolutionSummary:
        summary = ResolutionSummary()
        declined: Set[Tuple[str, str]] = set()
        while True:
            pair = self._next_pair(artists, declined)
            if pair is None:
                return summary
            first, second = artists[pair[0]].name, artists[pair[1]].name
            if not self._resolve_pair(artists, pair[0], pair[1], summary):
                declined.add((first, second))

    @staticmethod
    def _next_pair(
        artists: Sequence[Artist], declined: Set[Tuple[str, str]]
    ) -> Optional[Tuple[int, int]]:
        for i, j in find_similar_artists(artists):
            if (artists[i].name, artists[j].name) not in declined:
                return i, j
        return None

    def _resolve_pair(
        self, artists: List[Artist], i: int, j: int, summary: ResolutionSummary
    ) -> bool:
        """Return True if the pair was merged."""
        first, second = artists[i], artists[j]
        state = ResolutionState.PROMPT
        name = first.name
        renamed = False
        while state is not ResolutionState.DONE:
            if state is ResolutionState.PROMPT:
                choice = self.prompter.choose(
                    f"These two artists are named similarly:\n{first.name}\n{second.name}",
                    PAIR_OPTIONS,
                )
                if choice == PairChoice.KEEP_BOTH:
                    summary.kept += 1
                    return False
                if choice == PairChoice.MERGE_FIRST:
                    name = first.name
                    state = ResolutionState.DONE
                elif choice == PairChoice.MERGE_SECOND:
                    name = second.name
                    state = ResolutionState.DONE
                else:
                    state = ResolutionState.NAME_ENTRY
            else:
                candidate = self.prompter.ask_text("enter new name:")
                choice = self.prompter.choose(f"new name: '{candidate}'", NAME_OPTIONS)
                if choice == NameChoice.ACCEPT:
                    name = candidate
                    renamed = True
                    state = ResolutionState.DONE
                elif choice == NameChoice.DISMISS:
                    summary.kept += 1
                    return False

        logger.info("Merging artists %r and %r as %r", first.name, second.name, name)
        merge_artists(artists, i, j, name)
        summary.merged += 1
        if renamed:
            summary.renamed += 1
        return True


def resolve_conflicts(artists: List[Artist], prompter: Prompter) -> ResolutionSummary:
    """Resolve every similar-name pair in ``artists`` in place."""
    return ConflictResolver(prompter).resolve(artists)
