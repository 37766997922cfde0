"""
Line diffs for change previews.

A small LCS-based differ used by the confirmation gate to show what a file
write would change. Hunks are meant for a terminal preview and are not
byte-compatible with other diff tools.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from rich.text import Text

NO_CHANGES = "(no changes)"


class DiffLineType(Enum):
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


_PREFIXES = {
    DiffLineType.CONTEXT: " ",
    DiffLineType.ADDED: "+",
    DiffLineType.REMOVED: "-",
}


@dataclass(frozen=True)
class DiffLine:
    """One line of a computed diff."""
    type: DiffLineType
    content: str

    @classmethod
    def context(cls, content: str) -> "DiffLine":
        return cls(DiffLineType.CONTEXT, content)

    @classmethod
    def added(cls, content: str) -> "DiffLine":
        return cls(DiffLineType.ADDED, content)

    @classmethod
    def removed(cls, content: str) -> "DiffLine":
        return cls(DiffLineType.REMOVED, content)

    @property
    def is_change(self) -> bool:
        return self.type is not DiffLineType.CONTEXT

    def render(self) -> str:
        return f"{_PREFIXES[self.type]}{self.content}"


@dataclass(frozen=True)
class DiffStats:
    """
    Change counts between two texts.

    An added line paired with a removed line is reported once, as a
    modification, rather than as one addition plus one deletion.
    """
    additions: int = 0
    deletions: int = 0
    modifications: int = 0


def split_lines(text: str) -> list[str]:
    return text.split("\n")


def compute_lcs(a: Sequence[str], b: Sequence[str]) -> list[str]:
    """
    Longest common subsequence of two line sequences.

    Classic O(len(a) * len(b)) table. When both neighbouring sub-problems
    score equally the backtrack steps back in `a` first.
    """
    m, n = len(a), len(b)
    table = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        row, prev = table[i], table[i - 1]
        line = a[i - 1]
        for j in range(1, n + 1):
            if line == b[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    lcs: list[str] = []
    i, j = m, n
    while i > 0 and j > 0:
        if a[i - 1] == b[j - 1]:
            lcs.append(a[i - 1])
            i -= 1
            j -= 1
        elif table[i - 1][j] >= table[i][j - 1]:
            i -= 1
        else:
            j -= 1

    lcs.reverse()
    return lcs


def compute_diff(old_lines: Sequence[str], new_lines: Sequence[str]) -> list[DiffLine]:
    """
    Align both sequences against their LCS.

    Within each gap between common lines, removals are emitted before
    additions. Applying the result to old_lines (drop REMOVED, keep
    CONTEXT, insert ADDED in order) reproduces new_lines exactly.
    """
    diff: list[DiffLine] = []
    i = j = 0

    for common in compute_lcs(old_lines, new_lines):
        while old_lines[i] != common:
            diff.append(DiffLine.removed(old_lines[i]))
            i += 1
        while new_lines[j] != common:
            diff.append(DiffLine.added(new_lines[j]))
            j += 1
        diff.append(DiffLine.context(common))
        i += 1
        j += 1

    diff.extend(DiffLine.removed(line) for line in old_lines[i:])
    diff.extend(DiffLine.added(line) for line in new_lines[j:])
    return diff


def _hunk_ranges(diff_lines: Sequence[DiffLine], context_lines: int) -> list[tuple[int, int]]:
    total = len(diff_lines)
    ranges: list[tuple[int, int]] = []

    for index, line in enumerate(diff_lines):
        if not line.is_change:
            continue
        start = max(0, index - context_lines)
        end = min(total, index + context_lines + 1)
        if ranges and start <= ranges[-1][1]:
            ranges[-1] = (ranges[-1][0], end)
        else:
            ranges.append((start, end))

    return ranges


def format_unified_diff(diff_lines: Sequence[DiffLine], context_lines: int = 3) -> str:
    """
    Render a diff as hunks with up to context_lines of surrounding context.

    Each hunk starts with an "@@ -start,count +start,count @@" header;
    hunks are separated by a blank line.
    """
    ranges = _hunk_ranges(diff_lines, max(0, context_lines))
    if not ranges:
        return NO_CHANGES

    # Line positions (0-based) in the old and new text before each diff line.
    old_pos: list[int] = []
    new_pos: list[int] = []
    old_count = new_count = 0
    for line in diff_lines:
        old_pos.append(old_count)
        new_pos.append(new_count)
        if line.type is not DiffLineType.ADDED:
            old_count += 1
        if line.type is not DiffLineType.REMOVED:
            new_count += 1

    hunks: list[str] = []
    for start, end in ranges:
        body = diff_lines[start:end]
        old_len = sum(1 for line in body if line.type is not DiffLineType.ADDED)
        new_len = sum(1 for line in body if line.type is not DiffLineType.REMOVED)
        old_start = old_pos[start] + 1 if old_len else old_pos[start]
        new_start = new_pos[start] + 1 if new_len else new_pos[start]

        rendered = [f"@@ -{old_start},{old_len} +{new_start},{new_len} @@"]
        rendered.extend(line.render() for line in body)
        hunks.append("\n".join(rendered))

    return "\n\n".join(hunks)


def generate_diff(
    old_content: str | None,
    new_content: str | None,
    context_lines: int = 3,
) -> str:
    """Diff two texts, short-circuiting pure creation and pure deletion."""
    if not old_content and not new_content:
        return NO_CHANGES

    if not old_content:
        return f"New file\n+++ {len(split_lines(new_content))} lines"

    if not new_content:
        return f"Deleted file\n--- {len(split_lines(old_content))} lines"

    diff_lines = compute_diff(split_lines(old_content), split_lines(new_content))
    return format_unified_diff(diff_lines, context_lines)


def compute_stats(old_content: str | None, new_content: str | None) -> DiffStats:
    if not old_content and not new_content:
        return DiffStats()

    if not old_content:
        return DiffStats(additions=len(split_lines(new_content)))

    if not new_content:
        return DiffStats(deletions=len(split_lines(old_content)))

    additions = deletions = 0
    for line in compute_diff(split_lines(old_content), split_lines(new_content)):
        if line.type is DiffLineType.ADDED:
            additions += 1
        elif line.type is DiffLineType.REMOVED:
            deletions += 1

    modifications = min(additions, deletions)
    return DiffStats(
        additions=additions - modifications,
        deletions=deletions - modifications,
        modifications=modifications,
    )


def format_with_colors(diff: str, use_colors: bool = True) -> Text:
    """Style a rendered diff for a rich console."""
    text = Text()
    lines = diff.split("\n")

    for index, line in enumerate(lines):
        style = None
        if use_colors:
            if line.startswith("@@"):
                style = "cyan"
            elif line.startswith("+"):
                style = "green"
            elif line.startswith("-"):
                style = "red"
            elif line.startswith("==="):
                style = "bright_black"
        text.append(line, style=style)
        if index < len(lines) - 1:
            text.append("\n")

    return text
