"""Fuzzy matching of a search query against branch names."""
from typing import Dict, List

MAX_PREFIX_INDEX = 3
MAX_TOTAL_PREFIX_BONUS = 2
MIN_SCORE = 1


def find_unique_indexes(query: str, candidate: str) -> List[int]:
    """Find one index in candidate for every character of query.

    A repeated query character resumes its search after its own previous
    match, so each occurrence maps to a different position. Characters
    that cannot be found map to -1.

    E.g. query "aaa", candidate "aba" gives [0, 2, -1].

    Args:
        query: Search string typed by the user
        candidate: String being ranked

    Returns:
        One candidate index (or -1) per query character
    """
    previous_matches: Dict[str, int] = {}
    indexes = []

    for char in query:
        start = previous_matches.get(char, -1) + 1
        index = candidate.find(char, start)

        previous_matches[char] = index
        indexes.append(index)

    return indexes


def matched_count(query: str, candidate: str) -> int:
    """Number of query characters that were found in candidate."""
    return sum(1 for index in find_unique_indexes(query, candidate) if index != -1)


def fuzzy_match(query: str, candidate: str) -> float:
    """Score how well candidate matches query, normalized to (0, 1].

    Every matched character earns a continuity multiplier, which grows by
    one for each directly adjacent match and resets otherwise, plus a
    bonus for landing in the first three positions of candidate. Matches
    that go backwards relative to the previous one earn nothing. Unmatched
    query characters are dropped before scoring.

    The result always includes the base score, so a candidate matching
    nothing still scores above zero.

    Args:
        query: Search string typed by the user
        candidate: String being ranked

    Returns:
        Normalized match score
    """
    indexes = [index for index in find_unique_indexes(query, candidate) if index != -1]

    # Continuity multiplier grows by one per character in the best case,
    # so the top score without bonuses is 1 + 2 + ... + n = n(n+1)/2
    max_score = len(query) * (len(query) + 1) / 2 + MAX_TOTAL_PREFIX_BONUS + MIN_SCORE
    score = MIN_SCORE
    continuity = 1

    for i, index in enumerate(indexes):
        distance = 0 if i == 0 else index - indexes[i - 1]
        order_multiplier = 0 if distance < 0 else 1
        prefix_bonus = max(0, (MAX_PREFIX_INDEX - index) / MAX_PREFIX_INDEX)

        continuity = continuity + 1 if distance == 1 else 1

        score += (continuity + prefix_bonus) * order_multiplier

    return score / max_score
