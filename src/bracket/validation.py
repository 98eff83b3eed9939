"""
Setup validation run before a tournament is built.

The builders assume their input has already been checked; this module holds
those checks together with the preview figures shown while setting up.
"""
from typing import List, Optional

from .exceptions import SetupError
from .elimination import calculate_byes
from .groups import calculate_group_distribution

PERFECT_BRACKET_SIZES = (2, 4, 8, 16)


class SetupPlan:
    def __init__(self, name, player_names, use_group_phase, bracket_size, distribution=None):
        self.name = name
        self.player_names = player_names
        self.use_group_phase = use_group_phase
        self.bracket_size = bracket_size
        self.distribution = distribution

    def __repr__(self):
        return (f"SetupPlan(name={self.name}, players={len(self.player_names)}, "
                f"use_group_phase={self.use_group_phase}, bracket_size={self.bracket_size})")


def is_perfect_bracket(player_count: int) -> bool:
    return player_count in PERFECT_BRACKET_SIZES


def requires_group_phase(player_count: int) -> bool:
    return player_count >= 3 and not is_perfect_bracket(player_count)


def get_bracket_options(player_count: int) -> List[int]:
    """Bracket sizes a group phase can feed for this many players."""
    if not requires_group_phase(player_count):
        return []
    return [size for size in PERFECT_BRACKET_SIZES if size < player_count]


def normalize_player_names(player_names: List[str]) -> List[str]:
    """Strip whitespace and drop blank entries, keeping the input order."""
    names = []
    for name in player_names:
        name = str(name).strip() if name is not None else ''
        if name:
            names.append(name)
    return names


def validate_setup(name: str, player_names: List[str], bracket_size: Optional[int] = None) -> SetupPlan:
    """
    Check a tournament setup and decide how it will be played.

    Perfect bracket sizes (2, 4, 8, 16) play straight knock-out. Any other
    count of at least 4 needs a group phase feeding one of the bracket
    options; when bracket_size is not given the largest option is used.

    Raises SetupError with a user-facing message when the setup is invalid.
    """
    name = str(name or '').strip()
    if not name:
        raise SetupError("Tournament name is missing")

    names = normalize_player_names(player_names)
    seen = set()
    for player_name in names:
        if player_name in seen:
            raise SetupError(f'Player "{player_name}" already exists')
        seen.add(player_name)

    player_count = len(names)
    if player_count < 2:
        raise SetupError("At least 2 players are required")
    if player_count == 3:
        raise SetupError("3 players are not possible - need 2, 4 or more")

    if is_perfect_bracket(player_count):
        return SetupPlan(name, names, use_group_phase=False, bracket_size=player_count)

    options = get_bracket_options(player_count)
    if not options:
        raise SetupError("More players are needed for a valid group phase")

    if bracket_size is None:
        bracket_size = options[-1]
    elif bracket_size not in options:
        raise SetupError(f"Bracket size {bracket_size} is not available for {player_count} players "
                         f"(choose from {', '.join(str(o) for o in options)})")

    distribution = calculate_group_distribution(player_count, bracket_size)
    if distribution is None:
        raise SetupError(f"No group layout fits {player_count} players into a bracket of {bracket_size}")

    return SetupPlan(name, names, use_group_phase=True, bracket_size=bracket_size,
                     distribution=distribution)


def calculate_tournament_stats(player_count: int, bracket_size: int, distribution=None) -> dict:
    """Count group and knock-out matches for a setup preview."""
    group_matches = 0
    byes = 0
    if distribution is not None:
        for size in distribution.group_sizes:
            group_matches += size * (size - 1) // 2
    else:
        byes = calculate_byes(player_count)
        bracket_size = player_count + byes

    ko_rounds = bracket_size.bit_length() - 1 if bracket_size > 0 else 0
    ko_matches = max(bracket_size - 1, 0)
    return {
        'groupMatches': group_matches,
        'koRounds': ko_rounds,
        'koMatches': ko_matches,
        'totalMatches': group_matches + ko_matches,
        'byes': byes,
    }
