"""Opaque identifiers for players, matches, groups and tournaments."""
import uuid

ID_LENGTH = 8


def generate_id() -> str:
    """Return a short random hex id such as '3f9a0c1e'."""
    return uuid.uuid4().hex[:ID_LENGTH]
