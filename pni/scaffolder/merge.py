"""Idempotent config-file merging.

A target file is either created from a template or patched in place.
Patching walks an ordered list of ``Section`` objects.  Each section knows how
to recognise itself (its *signature*) and where it may be spliced in (its
*anchors*).  Present sections are skipped.  Missing sections are inserted at
the first anchor that matches, and sections with no matching anchor are
recorded as missed and left out.  A miss never raises and never writes a
partial edit.

Every fragment contains its own signature, so a second pass over the output
finds every section present and changes nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Union

from pni.utils import read_text, write_text

Pattern = Union[str, re.Pattern]
Fragment = Union[str, Callable[[str], str]]


# ---------------------------------------------------------------------------
# Sections and anchors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Anchor:
    """An insertion point inside existing text.

    ``pattern`` is a literal substring or a compiled regex; the first match
    is used.  The fragment goes right after the match, or right before it
    when ``before`` is set.  ``fragment`` overrides the section's fragment for
    this anchor; a callable receives the matched text and returns the
    fragment, which lets list insertions pick the right separator.
    """

    pattern: Pattern
    before: bool = False
    fragment: Fragment | None = None

    def locate(self, text: str) -> tuple[int, str] | None:
        if isinstance(self.pattern, str):
            index = text.find(self.pattern)
            if index < 0:
                return None
            matched = self.pattern
            start, end = index, index + len(matched)
        else:
            match = self.pattern.search(text)
            if match is None:
                return None
            matched = match.group(0)
            start, end = match.start(), match.end()
        return (start if self.before else end), matched


@dataclass(frozen=True)
class Section:
    """A named fragment that can be detected in, and spliced into, a file."""

    name: str
    signature: Pattern
    fragment: str
    anchors: tuple[Anchor, ...]

    def is_present(self, text: str) -> bool:
        if isinstance(self.signature, str):
            return self.signature in text
        return self.signature.search(text) is not None

    def splice(self, text: str) -> str | None:
        """Return *text* with the fragment inserted, or ``None`` on an anchor miss."""
        for anchor in self.anchors:
            located = anchor.locate(text)
            if located is None:
                continue
            position, matched = located
            fragment = anchor.fragment if anchor.fragment is not None else self.fragment
            if callable(fragment):
                fragment = fragment(matched)
            return text[:position] + fragment + text[position:]
        return None


class SectionStatus(str, Enum):
    INSERTED = "inserted"
    PRESENT = "present"
    MISSED = "missed"


@dataclass
class PatchResult:
    """Outcome of applying a section list to some text."""

    original: str
    content: str
    statuses: dict[str, SectionStatus] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return self.content != self.original

    def _with(self, status: SectionStatus) -> list[str]:
        return [name for name, s in self.statuses.items() if s is status]

    @property
    def inserted(self) -> list[str]:
        return self._with(SectionStatus.INSERTED)

    @property
    def present(self) -> list[str]:
        return self._with(SectionStatus.PRESENT)

    @property
    def missed(self) -> list[str]:
        return self._with(SectionStatus.MISSED)


def apply_sections(text: str, sections: list[Section]) -> PatchResult:
    """Apply *sections* to *text* in declared order.  Pure."""
    result = PatchResult(original=text, content=text)
    for section in sections:
        if section.is_present(result.content):
            result.statuses[section.name] = SectionStatus.PRESENT
            continue
        patched = section.splice(result.content)
        if patched is None:
            result.statuses[section.name] = SectionStatus.MISSED
            continue
        result.content = patched
        result.statuses[section.name] = SectionStatus.INSERTED
    return result


# ---------------------------------------------------------------------------
# Anchor helpers for JavaScript/TypeScript object literals
# ---------------------------------------------------------------------------


def when_key_absent(key: str, anchor_regex: str) -> "re.Pattern[str]":
    """Regex matching *anchor_regex* only if ``key:`` appears nowhere in the text.

    Used for anchors that create a whole new key, so an existing key is
    extended (or missed) rather than duplicated.
    """
    return re.compile(
        rf"\A(?![\s\S]*\b{re.escape(key)}\s*:)[\s\S]*?{anchor_regex}"
    )


def list_end(key: str) -> "re.Pattern[str]":
    """Regex matching ``key: [ ...items`` up to just before the closing bracket.

    Lists holding nested brackets do not match.
    """
    return re.compile(rf"\b{re.escape(key)}:\s*\[[^\[\]]*?(?=\s*\])")


def list_item(item: str) -> Callable[[str], str]:
    """Fragment builder appending *item* to a list matched by :func:`list_end`."""

    def build(matched: str) -> str:
        tail = matched.rstrip()
        if tail.endswith("["):
            return item
        if tail.endswith(","):
            return f" {item}"
        return f", {item}"

    return build


# ---------------------------------------------------------------------------
# File-level merge
# ---------------------------------------------------------------------------


class MergeAction(str, Enum):
    CREATED = "created"
    REGENERATED = "regenerated"
    PATCHED = "patched"
    MIGRATED = "migrated"
    UNCHANGED = "unchanged"


@dataclass
class MergeOutcome:
    path: Path
    action: MergeAction
    patch: PatchResult | None = None
    removed: Path | None = None

    @property
    def written(self) -> bool:
        return self.action is not MergeAction.UNCHANGED

    @property
    def missed(self) -> list[str]:
        return self.patch.missed if self.patch else []


@dataclass
class ConfigDocument:
    """One target file and the sections it must contain.

    Args:
        path: Where the merged file lives.
        sections: Sections applied, in order, when the file already exists.
        create: Produces the full content when the file is absent.
        legacy_paths: Older names for the same file.  When *path* is absent
            and a legacy file exists, the legacy file is patched, written to
            *path* and removed.
        prepare: Optional normalisation run on existing text before the
            sections.  Must itself be idempotent.
        regenerate: Always write the ``create`` content, even over an
            existing file.
    """

    path: Path
    sections: list[Section]
    create: Callable[[], str]
    legacy_paths: tuple[Path, ...] = ()
    prepare: Callable[[str], str] | None = None
    regenerate: bool = False

    def _read_existing(self) -> tuple[str | None, Path]:
        text = read_text(self.path)
        if text is not None:
            return text, self.path
        for legacy in self.legacy_paths:
            text = read_text(legacy)
            if text is not None:
                return text, legacy
        return None, self.path

    def patch(self, text: str) -> PatchResult:
        """Apply ``prepare`` and the sections to *text*.  Pure."""
        prepared = self.prepare(text) if self.prepare else text
        result = apply_sections(prepared, self.sections)
        result.original = text
        return result

    async def merge(self) -> MergeOutcome:
        """Create, patch, migrate or leave the file, and report which."""
        if self.regenerate:
            await write_text(self.path, self.create())
            for legacy in self.legacy_paths:
                if legacy.exists():
                    legacy.unlink()
            return MergeOutcome(self.path, MergeAction.REGENERATED)

        existing, source = self._read_existing()
        if existing is None:
            await write_text(self.path, self.create())
            return MergeOutcome(self.path, MergeAction.CREATED)

        result = self.patch(existing)

        if source != self.path:
            await write_text(self.path, result.content)
            source.unlink()
            return MergeOutcome(self.path, MergeAction.MIGRATED, result, removed=source)

        if not result.changed:
            return MergeOutcome(self.path, MergeAction.UNCHANGED, result)

        await write_text(self.path, result.content)
        return MergeOutcome(self.path, MergeAction.PATCHED, result)
