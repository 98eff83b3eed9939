"""
Data model for a knock-out tournament snapshot.

The Tournament is the aggregate root: players, matches and groups live
inside it and refer to each other only by id. Every type serializes to a
plain dict (camelCase keys) so the whole snapshot can be stored as one blob.
"""
import copy


class Player:
    def __init__(self, id, name):
        self.id = id
        self.name = name

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data):
        return cls(id=data['id'], name=data['name'])

    def __eq__(self, other):
        return isinstance(other, Player) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Player(id={self.id}, name={self.name})"


class Match:
    def __init__(self, id, round, position, player1_id=None, player2_id=None,
                 player1_score=None, player2_score=None, winner_id=None,
                 is_complete=False, group_id=None):
        self.id = id
        self.round = round  # 0 = group phase, 1..total_rounds = knock-out
        self.position = position
        self.player1_id = player1_id
        self.player2_id = player2_id
        self.player1_score = player1_score
        self.player2_score = player2_score
        self.winner_id = winner_id
        self.is_complete = is_complete
        self.group_id = group_id

    @property
    def is_bye(self):
        """True for an automatically completed match with fewer than two players."""
        return self.is_complete and not (self.player1_id and self.player2_id)

    def has_player(self, player_id):
        return player_id is not None and player_id in (self.player1_id, self.player2_id)

    def loser_id(self):
        if not self.winner_id:
            return None
        if self.winner_id == self.player1_id:
            return self.player2_id
        return self.player1_id

    def to_dict(self):
        data = {
            'id': self.id,
            'round': self.round,
            'position': self.position,
            'player1Id': self.player1_id,
            'player2Id': self.player2_id,
            'player1Score': self.player1_score,
            'player2Score': self.player2_score,
            'winnerId': self.winner_id,
            'isComplete': self.is_complete,
        }
        if self.group_id is not None:
            data['groupId'] = self.group_id
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            round=data['round'],
            position=data['position'],
            player1_id=data.get('player1Id'),
            player2_id=data.get('player2Id'),
            player1_score=data.get('player1Score'),
            player2_score=data.get('player2Score'),
            winner_id=data.get('winnerId'),
            is_complete=bool(data.get('isComplete', False)),
            group_id=data.get('groupId'),
        )

    def __eq__(self, other):
        return isinstance(other, Match) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, round={self.round}, position={self.position}, "
                f"players=({self.player1_id}, {self.player2_id}), winner={self.winner_id}, "
                f"complete={self.is_complete})")


class Group:
    def __init__(self, id, name, player_ids, matches=None):
        self.id = id
        self.name = name
        self.player_ids = list(player_ids)
        self.matches = matches if matches else []

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'playerIds': list(self.player_ids),
            'matches': [m.to_dict() for m in self.matches],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            player_ids=data.get('playerIds', []),
            matches=[Match.from_dict(m) for m in data.get('matches', [])],
        )

    def __eq__(self, other):
        return isinstance(other, Group) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Group(id={self.id}, name={self.name}, players={self.player_ids})"


class GroupStanding:
    """Win/loss record of one player inside a group. Derived, never stored."""

    def __init__(self, player_id, wins=0, losses=0, games_played=0):
        self.player_id = player_id
        self.wins = wins
        self.losses = losses
        self.games_played = games_played

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'wins': self.wins,
            'losses': self.losses,
            'gamesPlayed': self.games_played,
        }

    def __eq__(self, other):
        return isinstance(other, GroupStanding) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"GroupStanding(player_id={self.player_id}, wins={self.wins}, "
                f"losses={self.losses}, games_played={self.games_played})")


class Tournament:
    def __init__(self, id, name, players, matches, total_rounds, bracket_size,
                 created_at, current_round=1, is_complete=False, winner_id=None,
                 has_group_phase=False, groups=None, group_phase_complete=True,
                 advancing_per_group=0):
        self.id = id
        self.name = name
        self.players = players
        self.matches = matches
        self.current_round = current_round
        self.total_rounds = total_rounds
        self.is_complete = is_complete
        self.winner_id = winner_id
        self.created_at = created_at
        self.has_group_phase = has_group_phase
        self.groups = groups if groups else []
        self.group_phase_complete = group_phase_complete
        self.bracket_size = bracket_size
        self.advancing_per_group = advancing_per_group

    def copy(self):
        """Return an independent deep copy of the snapshot."""
        return copy.deepcopy(self)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'players': [p.to_dict() for p in self.players],
            'matches': [m.to_dict() for m in self.matches],
            'currentRound': self.current_round,
            'totalRounds': self.total_rounds,
            'isComplete': self.is_complete,
            'winnerId': self.winner_id,
            'createdAt': self.created_at,
            'hasGroupPhase': self.has_group_phase,
            'groups': [g.to_dict() for g in self.groups],
            'groupPhaseComplete': self.group_phase_complete,
            'bracketSize': self.bracket_size,
            'advancingPerGroup': self.advancing_per_group,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            players=[Player.from_dict(p) for p in data['players']],
            matches=[Match.from_dict(m) for m in data['matches']],
            current_round=data.get('currentRound', 1),
            total_rounds=data['totalRounds'],
            is_complete=bool(data.get('isComplete', False)),
            winner_id=data.get('winnerId'),
            created_at=data.get('createdAt'),
            has_group_phase=bool(data.get('hasGroupPhase', False)),
            groups=[Group.from_dict(g) for g in data.get('groups', [])],
            group_phase_complete=bool(data.get('groupPhaseComplete', True)),
            bracket_size=data['bracketSize'],
            advancing_per_group=data.get('advancingPerGroup', 0),
        )

    def __eq__(self, other):
        return isinstance(other, Tournament) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Tournament(id={self.id}, name={self.name}, players={len(self.players)}, "
                f"bracket_size={self.bracket_size}, complete={self.is_complete})")
