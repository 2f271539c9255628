"""Beginner-friendly label vocabulary and per-repository label tallying."""
from typing import Dict, Iterable, Sequence, Tuple

from good_first_repos.domain.models import Label


# Issue labels GitHub projects commonly use to flag beginner-friendly work
LABELS: Tuple[str, ...] = (
    "help wanted",
    "beginner",
    "beginners",
    "easy",
    "Good First Bug",
    "starter",
    "status: ideal-for-contribution",
    "low-hanging-fruit",
    "E-easy",
    "newbie",
    "easy fix",
    "easy-fix",
    "beginner friendly",
    "easy-pick",
    "Good for New Contributors",
    "first-timers-only",
    "contribution-starter",
    "good for beginner",
    "starter bug",
    "good-for-beginner",
    "your-first-pr",
    "first timers only",
    "first time contributor",
    "up-for-grabs",
    "good first issue",
    "Contribute: Good First Issue",
    "D - easy",
)


def aggregate_labels(
    issue_labels: Iterable[Iterable[Dict[str, str]]],
    vocabulary: Sequence[str] = LABELS
) -> Tuple[Label, ...]:
    """Count how many issues carry each vocabulary label.

    Args:
        issue_labels: One list of ``{"name", "color"}`` mappings per issue,
            in the order the API returned the issues
        vocabulary: Label names worth counting

    Returns:
        Labels with a non-zero count, most frequent first. Equal counts keep
        the vocabulary's order. A label's color is the one seen last.
    """
    counts = {name: 0 for name in vocabulary}
    colors = {name: "" for name in vocabulary}

    for labels in issue_labels:
        for label in labels:
            name = label["name"]
            if name not in counts:
                continue
            counts[name] += 1
            colors[name] = label.get("color") or ""

    tallied = [
        Label(name=name, count=counts[name], color=colors[name])
        for name in vocabulary
        if counts[name] > 0
    ]
    # sorted() is stable, so ties stay in vocabulary order
    return tuple(sorted(tallied, key=lambda label: label.count, reverse=True))
