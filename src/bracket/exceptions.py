class TournamentError(ValueError):
    """Base class for errors raised while setting up a tournament."""


class InvalidGroupDistribution(TournamentError):
    """No group layout fits the requested player count and bracket size."""

    def __init__(self, player_count, bracket_size):
        self.player_count = player_count
        self.bracket_size = bracket_size
        super().__init__(
            f"Invalid group distribution configuration: {player_count} players "
            f"cannot feed a bracket of {bracket_size}"
        )


class SetupError(TournamentError):
    """The tournament setup input was rejected before reaching the builder."""
