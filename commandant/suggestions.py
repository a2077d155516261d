"""
Commandant suggestion engine ("did you mean ...?").

Given an unrecognized token and the names that were valid at that point, pick
the closest candidate by edit distance, or nothing when every candidate is too
far away to be a plausible typo.

Rules
- Distance is the optimal string alignment distance (Levenshtein edits plus
  transposition of two adjacent characters), computed case-insensitively.
- A candidate qualifies when distance <= max(1, floor(len(token) * 0.4)).
- Among qualifying candidates the lowest distance wins; ties go to the
  candidate declared first.
"""
import math


def distance(source, target, /):
    """
    Optimal string alignment distance between two strings (case-insensitive).

    Examples
    - distance("buld", "build")   -> 1   (insertion)
    - distance("--nmae", "--name") -> 1  (adjacent transposition)
    - distance("Build", "build")  -> 0
    """
    if not isinstance(source, str) or not isinstance(target, str):
        raise TypeError("distance() arguments must be strings")

    source, target = source.casefold(), target.casefold()
    if source == target:
        return 0
    if not source or not target:
        return len(source) or len(target)

    # Rolling rows: two-back, previous, current.
    before = None
    previous = list(range(len(target) + 1))
    for row, char in enumerate(source, 1):
        current = [row] + [0] * len(target)
        for column, other in enumerate(target, 1):
            cost = char != other
            current[column] = min(
                previous[column] + 1,          # deletion
                current[column - 1] + 1,       # insertion
                previous[column - 1] + cost,   # substitution
            )
            if (
                before is not None and
                column > 1 and
                char == target[column - 2] and
                source[row - 2] == other
            ):
                current[column] = min(current[column], before[column - 2] + 1)  # transposition
        before, previous = previous, current
    return previous[-1]


def threshold(token, /):
    """
    Maximum edit distance still considered a typo of the given token.
    """
    return max(1, math.floor(len(token) * 0.4))


def suggest(token, candidates, /):
    """
    Return the closest candidate to token, or None.

    Parameters
    - token: str, the unrecognized input.
    - candidates: iterable of str in declaration order (duplicates are harmless).

    Returns
    - str | None
    """
    if not isinstance(token, str):
        raise TypeError("suggest() first argument must be a string")

    limit = threshold(token)
    nearest, best = None, limit + 1
    for candidate in candidates:
        # Strict comparison keeps the earliest candidate on ties.
        if (score := distance(token, candidate)) < best:
            nearest, best = candidate, score
    return nearest


__all__ = (
    "distance",
    "threshold",
    "suggest",
)
