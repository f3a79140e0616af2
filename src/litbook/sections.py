"""Hierarchical section numbering driven by ATX headings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from litbook.lexer import heading_match
from litbook.types import Section


def next_section(current: Section, line: str) -> tuple[Section, bool]:
    """Return the section in force after ``line`` and whether it changed.

    Going deeper keeps the existing numbers and starts every new level at 1;
    staying level or going shallower increments the number at the heading's
    depth and drops anything below it.
    """
    found = heading_match(line)
    if found is None:
        return current, False

    new_level, text = found
    old_level = current.depth
    if new_level > old_level:
        nums = current.nums + (1,) * (new_level - old_level)
    else:
        nums = current.nums[: new_level - 1] + (current.nums[new_level - 1] + 1,)
    return Section(in_name=current.in_name, nums=nums, text=text), True


def sorted_sections(sections: Iterable[Section]) -> list[Section]:
    return sorted(sections, key=Section.sort_key)


def sections_as_english(
    sections: Sequence[Section],
    *,
    link: bool = False,
    from_name: str = "",
    href_for: dict[str, str] | None = None,
) -> str:
    """Render sections as ``section 1`` / ``sections 1, 2 and 3``.

    With ``link=True`` each number becomes ``[nums](href#anchor)``; ``href_for``
    maps a section's input file to its link target as seen from ``from_name``.
    """
    parts: list[str] = []
    for sec in sections:
        if link:
            target_name = sec.in_name or from_name
            href = (href_for or {}).get(target_name, target_name)
            parts.append(f"[{sec.nums_string()}]({href}#{sec.anchor()})")
        else:
            parts.append(sec.nums_string())

    if len(parts) > 1:
        listing = ", ".join(parts[:-1]) + " and " + parts[-1]
    else:
        listing = "".join(parts)
    prefix = "sections " if len(parts) > 1 else "section "
    return prefix + listing
