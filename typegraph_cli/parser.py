"""Resilient extraction of type declarations from generated ``.ts`` output.

No full TypeScript grammar is involved.  Declarations are located by a
header regex, their bodies are isolated by counting brace nesting, and
fields are recovered line by line on a best-effort basis:

- Unterminated declarations are dropped.
- Malformed field lines are skipped.
- Empty input yields an empty mapping.

Braces inside string literals or comments are *not* understood and will
corrupt the match for the declaration that contains them.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .models import DeclarationRecord, FieldInfo, FieldKind

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------
# Optional generic parameter list between the name and "="; nested angle
# brackets are matched by backtracking to the first "<...> =" that fits.
DECLARATION_HEADER_RE = re.compile(r"export\s+type\s+(\w+)\s*(?:<.*?>)?\s*=")
PARENT_RE = re.compile(r"^(\w+)\s*&")
FIELD_RE = re.compile(r"^(\w+)(\?)?:\s*(.+?);?$")

SUBTYPE_SLOT_MARKER = "TypeConstructor"
SUBTYPE_SLOT_RE = re.compile(r"^(\w+):\s*TypeConstructor<(\w+)>")

DEFINE_CALL_RE = re.compile(r"""define\s*\(\s*['"]([^'"]+)['"]""")

SKIP_DIRS: Set[str] = {
    "node_modules", ".git", "dist", "build", "out", "coverage",
    ".tactica", ".next", ".turbo", ".cache",
}


# ===================================================================
# Balanced spans
# ===================================================================

def find_balanced_span(text: str, start: int = 0) -> Optional[Tuple[int, int]]:
    """Return ``(open_index, close_index)`` of the first ``{...}`` at or after *start*.

    Nested braces are counted; the span closes on the brace that brings the
    depth back to zero.  Returns ``None`` when there is no ``{`` or it is
    never closed.
    """
    open_index = text.find("{", start)
    if open_index == -1:
        return None

    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return open_index, index
    return None


# ===================================================================
# Field classification
# ===================================================================

def split_field_candidates(body: str) -> List[str]:
    """Split the interior of an object literal into one string per member.

    A member ends at a newline or ``;`` at nesting depth zero.  Lines that
    open a nested object keep accumulating until it closes, so an inline
    object type stays a single candidate.
    """
    candidates: List[str] = []
    current: List[str] = []
    depth = 0

    def _flush() -> None:
        text = "".join(current).strip()
        if text:
            candidates.append(text)
        current.clear()

    for raw_line in body.split("\n"):
        line = raw_line.strip()
        if depth == 0 and not current and (not line or line.startswith("//")):
            continue

        for char in line:
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            elif char == ";" and depth == 0:
                _flush()
                continue
            current.append(char)

        if depth <= 0:
            depth = 0
            _flush()
        else:
            current.append(" ")

    _flush()
    return candidates


def classify_field_line(candidate: str) -> Optional[FieldInfo]:
    """Turn one member candidate into a plain field or a subtype slot.

    Returns ``None`` for anything that does not look like a field.
    """
    if candidate.startswith("//"):
        return None

    if SUBTYPE_SLOT_MARKER in candidate:
        slot = SUBTYPE_SLOT_RE.match(candidate)
        if slot is None:
            return None
        return FieldInfo(
            name=slot.group(1),
            type=f"{SUBTYPE_SLOT_MARKER}<{slot.group(2)}>",
            optional=False,
            kind=FieldKind.SUBTYPE_SLOT,
        )

    match = FIELD_RE.match(candidate)
    if match is None:
        return None
    return FieldInfo(
        name=match.group(1),
        type=match.group(3).strip(),
        optional=match.group(2) == "?",
    )


def parse_fields(definition: str) -> Dict[str, FieldInfo]:
    """Parse the fields of the first balanced ``{...}`` in *definition*."""
    fields: Dict[str, FieldInfo] = {}
    span = find_balanced_span(definition)
    if span is None:
        return fields

    open_index, close_index = span
    for candidate in split_field_candidates(definition[open_index + 1: close_index]):
        info = classify_field_line(candidate)
        if info is not None:
            fields[info.name] = info
    return fields


# ===================================================================
# Declarations
# ===================================================================

def _collect_declaration(lines: List[str], start: int) -> Tuple[Optional[str], int]:
    """Accumulate the declaration starting at *lines[start]*.

    Only text after the header's ``=`` belongs to the declaration; anything
    earlier on that line (comments, stray braces) is neither counted nor kept.

    Returns ``(text, next_index)``.  ``text`` is ``None`` when the outer
    braces never close; ``next_index`` is then the line to resume at.
    """
    header = DECLARATION_HEADER_RE.search(lines[start])
    body_start = header.end() if header else 0
    depth = 0
    entered = False
    buffer: List[str] = []

    for index in range(start, len(lines)):
        line = lines[index]
        if index > start and not entered and DECLARATION_HEADER_RE.search(line):
            # Next header reached before any body opened
            return None, index

        segment = line[body_start:] if index == start else line
        buffer.append(segment)
        for char in segment:
            if char == "{":
                depth += 1
                entered = True
            elif char == "}":
                depth -= 1
                if entered and depth == 0:
                    return "\n".join(buffer), index + 1

    return None, start + 1


def _clean_definition(text: str) -> str:
    cleaned = text.strip()
    if cleaned.endswith(";"):
        cleaned = cleaned[:-1].strip()
    return cleaned


def parse_declarations(text: str, source_file: str = "") -> Dict[str, DeclarationRecord]:
    """Extract every ``export type Name = ...`` declaration from *text*.

    Later declarations with the same name replace earlier ones.
    """
    declarations: Dict[str, DeclarationRecord] = {}
    lines = text.split("\n")
    index = 0

    while index < len(lines):
        header = DECLARATION_HEADER_RE.search(lines[index])
        if header is None:
            index += 1
            continue

        name = header.group(1)
        start = index
        body, index = _collect_declaration(lines, start)
        if body is None:
            logger.debug("Dropping unterminated declaration '%s' at line %d", name, start + 1)
            continue

        definition = _clean_definition(body)
        parent = PARENT_RE.match(definition)
        declarations[name] = DeclarationRecord(
            name=name,
            parent_name=parent.group(1) if parent else None,
            fields=parse_fields(definition),
            line=start + 1,
            source_file=source_file,
        )

    return declarations


def scan_define_calls(text: str, source_file: str = "") -> List[DeclarationRecord]:
    """Find ``define('Name', ...)`` calls and emit bare records for them."""
    records: List[DeclarationRecord] = []
    for match in DEFINE_CALL_RE.finditer(text):
        records.append(DeclarationRecord(
            name=match.group(1),
            parent_name=None,
            fields={},
            line=text.count("\n", 0, match.start()) + 1,
            source_file=source_file,
        ))
    return records


# ===================================================================
# Parser classes
# ===================================================================

class Parser(ABC):
    """Abstract base class for declaration sources."""

    @abstractmethod
    def parse_text(self, text: str, source_file: str = "") -> Dict[str, DeclarationRecord]:
        """Parse one text blob into declaration records keyed by name."""
        ...

    def parse_file(
        self,
        file_path: Path,
        source: Optional[str] = None,
    ) -> Dict[str, DeclarationRecord]:
        """Parse a single file.  ``OSError`` from reading propagates."""
        if source is None:
            source = file_path.read_text(encoding="utf-8", errors="replace")
        return self.parse_text(source, str(file_path))


class DeclarationParser(Parser):
    """Parser for the generated declarations file (``.tactica/types.ts``)."""

    def parse_text(self, text: str, source_file: str = "") -> Dict[str, DeclarationRecord]:
        declarations = parse_declarations(text, source_file)
        logger.debug("Parsed %d declarations from %s", len(declarations), source_file or "<text>")
        return declarations


class DefineCallScanner(Parser):
    """Fallback used when no generated declarations file exists.

    Only detects presence: records carry a name and a location, never a
    parent or fields.  The first occurrence of a name wins.
    """

    def __init__(self, extensions: Optional[Set[str]] = None) -> None:
        self.extensions = extensions or {".ts"}

    def parse_text(self, text: str, source_file: str = "") -> Dict[str, DeclarationRecord]:
        found: Dict[str, DeclarationRecord] = {}
        for record in scan_define_calls(text, source_file):
            found.setdefault(record.name, record)
        return found

    def parse_project(self, project_root: Path) -> Dict[str, DeclarationRecord]:
        found: Dict[str, DeclarationRecord] = {}
        if not project_root.is_dir():
            return found

        for file_path in sorted(project_root.rglob("*")):
            if file_path.suffix not in self.extensions or not file_path.is_file():
                continue
            if any(part in SKIP_DIRS for part in file_path.relative_to(project_root).parts):
                continue
            for name, record in self.parse_file(file_path).items():
                found.setdefault(name, record)

        logger.debug("Found %d define() calls under %s", len(found), project_root)
        return found
