"""
Output sinks that receive generated units.

Registering the same key with the same text twice is a no-op, so a sink can be
reused across repeated passes over unchanged input.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import final, override

logger = logging.getLogger(__name__)


class OutputSink(ABC):
    @abstractmethod
    def add_source(self, key: str, text: str) -> None:
        """
        Register one generated unit.

        :raises ValueError: If ``key`` was already registered with different text.
        """


@final
@dataclass(kw_only=True, eq=False)
class MemorySink(OutputSink, Mapping[str, str]):
    """Keeps generated units in memory, in registration order."""

    _sources: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    @override
    def add_source(self, key: str, text: str) -> None:
        existing = self._sources.get(key)
        if existing is not None and existing != text:
            raise ValueError(f"Generated source {key!r} registered twice with different text")
        self._sources[key] = text

    def __getitem__(self, key: str) -> str:
        return self._sources[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)


@final
@dataclass(kw_only=True, eq=False)
class DirectorySink(OutputSink):
    """
    Writes each unit to ``directory / key``.

    Files whose content already matches are left untouched, keeping their
    modification times stable for downstream build tools. :meth:`prune` removes
    files left behind by earlier passes.
    """

    directory: Path

    written: list[Path] = field(default_factory=list, init=False)
    """Files written (not merely confirmed unchanged) by this sink."""

    removed: list[Path] = field(default_factory=list, init=False)
    """Stale files deleted by :meth:`prune`."""

    _registered: dict[Path, str] = field(default_factory=dict, init=False, repr=False)

    @override
    def add_source(self, key: str, text: str) -> None:
        target = self.directory / key
        existing = self._registered.get(target)
        if existing is not None:
            if existing != text:
                raise ValueError(f"Generated source {key!r} registered twice with different text")
            return
        self._registered[target] = text
        if target.is_file() and target.read_text(encoding="utf-8") == text:
            logger.debug("Unchanged: %s", target)
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        self.written.append(target)
        logger.info("Wrote %s", target)

    def prune(self, *patterns: str) -> list[Path]:
        """
        Delete files below :attr:`directory` matching any of ``patterns`` that
        were not registered with this sink, then any directories left empty.

        :param patterns: Glob patterns as accepted by :meth:`pathlib.Path.rglob`.
        :return: The deleted files.
        """
        if not self.directory.is_dir():
            return []
        stale = sorted(
            {
                path
                for pattern in patterns
                for path in self.directory.rglob(pattern)
                if path.is_file() and path not in self._registered
            }
        )
        for path in stale:
            path.unlink()
            self.removed.append(path)
            logger.info("Removed stale %s", path)
        for path in stale:
            parent = path.parent
            while parent != self.directory and parent.is_dir() and not any(parent.iterdir()):
                parent.rmdir()
                parent = parent.parent
        return stale
