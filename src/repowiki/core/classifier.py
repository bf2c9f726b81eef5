"""Change classification for incremental wiki updates.

Maps the paths touched by a commit to a regeneration decision:

1. Excluded prefixes are dropped; nothing left means skip.
2. At or above the full-generation threshold, regenerate everything.
3. Otherwise collect the affected sections, in first-seen order.
"""

from collections.abc import Iterable, Mapping

from ..constants import ROOT_SECTION
from ..models import Decision, DecisionKind


def normalize_path(path: str) -> str:
    """Normalize a repo-relative path to POSIX form without a leading ./"""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def is_excluded(path: str, excluded_prefixes: Iterable[str]) -> bool:
    """Check whether a path falls under any excluded prefix."""
    path = normalize_path(path)
    return any(path.startswith(normalize_path(prefix)) for prefix in excluded_prefixes if prefix)


def filter_excluded(paths: Iterable[str], excluded_prefixes: Iterable[str]) -> list[str]:
    """Drop excluded paths, keeping order."""
    prefixes = list(excluded_prefixes)
    return [normalize_path(p) for p in paths if not is_excluded(p, prefixes)]


def section_for_path(path: str, rules: Mapping[str, str] | None = None) -> str:
    """Map a path to its wiki section.

    The longest matching rule prefix wins. Without a match, the path's
    top-level directory names the section; root-level files belong to the
    overview section.

    Args:
        path: Repo-relative path
        rules: Path prefix -> section name

    Returns:
        Section name
    """
    path = normalize_path(path)
    best: str | None = None
    for prefix in rules or {}:
        norm = normalize_path(prefix)
        if norm and path.startswith(norm) and (best is None or len(norm) > len(best)):
            best = prefix
    if best is not None:
        return rules[best]  # type: ignore[index]

    top, sep, _ = path.partition("/")
    return top if sep else ROOT_SECTION


def affected_sections(paths: Iterable[str], rules: Mapping[str, str] | None = None) -> list[str]:
    """Deduplicated sections for paths, in first-seen order."""
    return list(dict.fromkeys(section_for_path(p, rules) for p in paths))


def classify(
    paths: Iterable[str],
    excluded_prefixes: Iterable[str] = (),
    full_threshold: int = 20,
    section_rules: Mapping[str, str] | None = None,
) -> Decision:
    """Decide what to regenerate for a set of changed paths.

    Args:
        paths: Changed paths, in git order
        excluded_prefixes: Prefixes whose paths never trigger regeneration
        full_threshold: Remaining path count that triggers full regeneration
        section_rules: Path prefix -> section name

    Returns:
        Skip, Full or Incremental decision
    """
    remaining = filter_excluded(paths, excluded_prefixes)
    if not remaining:
        return Decision.skip("no relevant changes after exclusions")

    if len(remaining) >= full_threshold:
        return Decision(
            kind=DecisionKind.FULL,
            paths=tuple(remaining),
            reason=f"{len(remaining)} changed files >= threshold {full_threshold}",
        )

    sections = affected_sections(remaining, section_rules)
    return Decision(
        kind=DecisionKind.INCREMENTAL,
        paths=tuple(remaining),
        sections=tuple(sections),
        reason=f"{len(remaining)} changed files in {len(sections)} sections",
    )
