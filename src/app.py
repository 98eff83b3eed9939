"""
Flask web application for the knock-out bracket.

Holds the single persisted tournament snapshot and exposes the engine
operations as a JSON API. Every successful mutation is written back to disk.
"""
import os
import logging
import yaml
from filelock import FileLock
from flask import Flask, jsonify, request
from bracket.elimination import get_round_name, get_round_matches
from bracket.exceptions import TournamentError
from bracket.groups import get_advancing_player_ids, get_group_standings
from bracket.models import Tournament
from bracket.tournament import (
    create_tournament,
    create_tournament_with_groups,
    get_player_by_id,
    select_group_winner,
    select_winner,
)
from bracket.validation import (
    calculate_tournament_stats,
    get_bracket_options,
    normalize_player_names,
    validate_setup,
)

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
TOURNAMENT_FILE = os.path.join(DATA_DIR, 'tournament.yaml')
LOCK_TIMEOUT_SECONDS = 10

app.logger.setLevel(os.environ.get('TOURNAMENT_LOG_LEVEL', 'INFO'))
logging.getLogger('bracket').setLevel(os.environ.get('TOURNAMENT_ENGINE_LOG_LEVEL', 'WARNING'))


def _data_lock() -> FileLock:
    """Lock guarding the snapshot file."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=LOCK_TIMEOUT_SECONDS)


def load_tournament():
    """Load the stored tournament. Missing or unreadable data means no tournament."""
    if not os.path.exists(TOURNAMENT_FILE):
        return None
    try:
        with open(TOURNAMENT_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not data:
            return None
        return Tournament.from_dict(data)
    except (yaml.YAMLError, KeyError, TypeError, ValueError, AttributeError) as e:
        app.logger.warning(f'Failed to parse {TOURNAMENT_FILE}: {e}')
        return None


def save_tournament(tournament):
    """Write the tournament snapshot to disk."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(TOURNAMENT_FILE, 'w', encoding='utf-8') as f:
        yaml.safe_dump(tournament.to_dict(), f, default_flow_style=False, sort_keys=False)


def clear_tournament():
    """Delete the stored tournament, if any."""
    if os.path.exists(TOURNAMENT_FILE):
        os.remove(TOURNAMENT_FILE)


def _player_name(tournament, player_id):
    player = get_player_by_id(tournament, player_id)
    return player.name if player else None


def build_tournament_view(tournament) -> dict:
    """Snapshot plus the derived data a bracket page needs."""
    rounds = []
    for round_number in range(1, tournament.total_rounds + 1):
        rounds.append({
            'round': round_number,
            'name': get_round_name(round_number, tournament.total_rounds),
            'matches': [dict(m.to_dict(), isBye=m.is_bye)
                        for m in get_round_matches(tournament, round_number)],
        })

    standings = {}
    for group in tournament.groups:
        advancing = set(get_advancing_player_ids(group, tournament.advancing_per_group))
        standings[group.id] = [
            dict(s.to_dict(), name=_player_name(tournament, s.player_id),
                 advancing=s.player_id in advancing)
            for s in get_group_standings(group)
        ]

    return {
        'tournament': tournament.to_dict(),
        'rounds': rounds,
        'standings': standings,
        'winnerName': _player_name(tournament, tournament.winner_id),
    }


def _json_body():
    """Request JSON as a dict; anything else is rejected."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TournamentError('Request body must be a JSON object')
    return data


def _parse_setup_request(data):
    name = data.get('name', '')
    players = data.get('players', [])
    if not isinstance(players, list):
        raise TournamentError('Players must be a list of names')
    bracket_size = data.get('bracketSize')
    if bracket_size is not None:
        try:
            bracket_size = int(bracket_size)
        except (TypeError, ValueError):
            raise TournamentError(f'Invalid bracket size: {bracket_size}')
    return name, players, bracket_size


@app.route('/api/tournament', methods=['GET'])
def api_get_tournament():
    """Return the current tournament, or null when none exists."""
    with _data_lock():
        tournament = load_tournament()
    if tournament is None:
        return jsonify({'tournament': None})
    return jsonify(build_tournament_view(tournament))


@app.route('/api/setup/preview', methods=['POST'])
def api_setup_preview():
    """Validate a setup without creating anything."""
    try:
        data = _json_body()
    except TournamentError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    players = data.get('players')
    names = normalize_player_names(players) if isinstance(players, list) else []
    options = get_bracket_options(len(names))
    try:
        name, players, bracket_size = _parse_setup_request(data)
        plan = validate_setup(name, players, bracket_size)
    except TournamentError as e:
        return jsonify({'success': False, 'error': str(e), 'bracketOptions': options,
                        'playerCount': len(names)})

    return jsonify({
        'success': True,
        'playerCount': len(plan.player_names),
        'useGroupPhase': plan.use_group_phase,
        'bracketSize': plan.bracket_size,
        'bracketOptions': options,
        'groupPlan': plan.distribution.to_dict() if plan.distribution else None,
        'stats': calculate_tournament_stats(len(plan.player_names), plan.bracket_size, plan.distribution),
    })


@app.route('/api/tournament', methods=['POST'])
def api_create_tournament():
    """Create a tournament, replacing any stored one."""
    try:
        data = _json_body()
        name, players, bracket_size = _parse_setup_request(data)
        plan = validate_setup(name, players, bracket_size)
        if plan.use_group_phase:
            tournament = create_tournament_with_groups(plan.name, plan.player_names, plan.bracket_size)
        else:
            tournament = create_tournament(plan.name, plan.player_names)
    except TournamentError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    with _data_lock():
        save_tournament(tournament)
    app.logger.info(f'Created tournament "{tournament.name}" with {len(tournament.players)} players')
    return jsonify(dict(build_tournament_view(tournament), success=True))


def _record_result(mutate):
    try:
        winner_id = _json_body().get('winnerId')
    except TournamentError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    if not winner_id:
        return jsonify({'success': False, 'error': 'winnerId required'}), 400

    with _data_lock():
        tournament = load_tournament()
        if tournament is None:
            return jsonify({'success': False, 'error': 'No tournament'}), 404
        updated = mutate(tournament, winner_id)
        changed = updated is not tournament
        if changed:
            save_tournament(updated)

    return jsonify(dict(build_tournament_view(updated), success=True, changed=changed))


@app.route('/api/tournament/matches/<match_id>/winner', methods=['POST'])
def api_select_winner(match_id):
    """Record the winner of a knock-out match."""
    return _record_result(lambda t, winner_id: select_winner(t, match_id, winner_id))


@app.route('/api/tournament/groups/<group_id>/matches/<match_id>/winner', methods=['POST'])
def api_select_group_winner(group_id, match_id):
    """Record the winner of a group match."""
    return _record_result(lambda t, winner_id: select_group_winner(t, group_id, match_id, winner_id))


@app.route('/api/reset', methods=['POST'])
def api_reset():
    """Delete the current tournament."""
    with _data_lock():
        clear_tournament()
    app.logger.info('Tournament reset')
    return jsonify({'success': True})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
