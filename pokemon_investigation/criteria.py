from pokemon_investigation.schemas import MatchFailureReason, Matched, MatchOutcome, NotMatched, PokemonRecord


MATCHING_TYPES = frozenset({"electric", "fire", "psychic"})
MATCHING_MOVES = frozenset({"thunder-shock", "quick-attack", "electro-ball", "thunder-wave"})


def evaluate(record: PokemonRecord) -> MatchOutcome:
    matched_types = tuple(tag for tag in (t.lower() for t in record.types) if tag in MATCHING_TYPES)
    if not matched_types:
        return NotMatched(MatchFailureReason.NO_MATCHING_TYPE)

    matched_moves = tuple(tag for tag in (m.lower() for m in record.moves) if tag in MATCHING_MOVES)
    if not matched_moves:
        return NotMatched(MatchFailureReason.NO_MATCHING_MOVE)

    return Matched(matched_types=matched_types, matched_moves=matched_moves)
