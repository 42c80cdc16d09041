from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from .geometry import C1, C8, E1, E8, G1, G8, file_of, rank_of, square_at
from .move import FILE_NAMES, RANK_NAMES, Color, Piece
from .movegen import find_pseudo_move

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


logger = logging.getLogger(__name__)

# Placeholder SAN attached to generated moves; SAN generation is not implemented.
SAN_PLACEHOLDER = "?"

KING_SIDE = "K"
QUEEN_SIDE = "Q"


@dataclass(frozen=True)
class SanMove:
    """Partial move descriptor parsed from short algebraic notation.

    Only the fields present in the text are set; ``resolve_san`` fills in
    the rest from the position.
    """

    piece: Piece = Piece.PAWN
    from_file: Optional[int] = None
    from_rank: Optional[int] = None
    capture: bool = False
    to_sq: Optional[int] = None
    promotion: Optional[Piece] = None
    castle: Optional[str] = None


_PIECE = "(?P<piece>[KQRNB])"
_FROM_FILE = "(?P<from_file>[a-h])"
_FROM_RANK = "(?P<from_rank>[1-8])"
_CAPTURE = "(?P<capture>x)"
_TO = "(?P<to_file>[a-h])(?P<to_rank>[1-8])"
_PROMOTION = "=(?P<promotion>[KQRNB])"

# Tried in order; the first pattern matching the whole text wins.
SAN_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        _PIECE + _FROM_FILE + _FROM_RANK + _CAPTURE + _TO,  # Rc5xd5
        _PIECE + _FROM_FILE + _FROM_RANK + _TO,  # Rc5d5
        _PIECE + _FROM_RANK + _CAPTURE + _TO,  # Q5xd4
        _PIECE + _FROM_RANK + _TO,  # Q5d4
        _PIECE + _FROM_FILE + _CAPTURE + _TO,  # Rcxd5
        _PIECE + _FROM_FILE + _TO,  # Rcd5
        _PIECE + _CAPTURE + _TO,  # Bxe2
        _PIECE + _TO,  # Be2
        _FROM_FILE + _CAPTURE + _TO + _PROMOTION,  # exf8=Q
        _FROM_FILE + _CAPTURE + _TO,  # fxe4
        _TO + _PROMOTION,  # e8=Q
        _TO,  # e4
    )
)

_CASTLE_TARGETS = {
    (Color.WHITE, KING_SIDE): (E1, G1),
    (Color.WHITE, QUEEN_SIDE): (E1, C1),
    (Color.BLACK, KING_SIDE): (E8, G8),
    (Color.BLACK, QUEEN_SIDE): (E8, C8),
}


def parse_san(san: str) -> Optional[SanMove]:
    """Parse short algebraic notation into a partial move descriptor.

    Args:
        san (str): Move text such as ``"Nf3"``, ``"exd5"``, ``"e8=Q"`` or
            ``"O-O"``. One trailing ``+`` or ``#`` is ignored.

    Returns:
        Optional[SanMove]: Parsed descriptor, or None if no pattern matches.
    """
    if san.endswith(("+", "#")):
        san = san[:-1]
    if san == "O-O":
        return SanMove(piece=Piece.KING, castle=KING_SIDE)
    if san == "O-O-O":
        return SanMove(piece=Piece.KING, castle=QUEEN_SIDE)

    for regex in SAN_PATTERNS:
        m = regex.fullmatch(san)
        if m is None:
            continue
        fields = m.groupdict()
        return SanMove(
            piece=Piece.from_letter(fields["piece"]) if fields.get("piece") else Piece.PAWN,
            from_file=_index_or_none(FILE_NAMES, fields.get("from_file")),
            from_rank=_index_or_none(RANK_NAMES, fields.get("from_rank")),
            capture=bool(fields.get("capture")),
            to_sq=square_at(
                FILE_NAMES.index(fields["to_file"]), RANK_NAMES.index(fields["to_rank"])
            ),
            promotion=Piece.from_letter(fields["promotion"]) if fields.get("promotion") else None,
        )
    return None


def resolve_san(board: "Board", san_move: SanMove, strict: bool = False) -> Optional["Board"]:
    """Resolve a parsed SAN descriptor against ``board`` and apply it.

    Candidate source squares are tried in increasing square order, limited
    to the side to move's pieces of the named kind (and to the named file
    and/or rank); the first candidate whose move applies wins. Uniqueness is
    not checked unless ``strict`` is set, in which case an ambiguous
    descriptor resolves to None.

    Returns:
        Optional[Board]: Board after the move, or None if no candidate is
            legal (or, in strict mode, more than one is).
    """
    side = board.side_to_move
    if san_move.castle is not None:
        king_from, king_to = _CASTLE_TARGETS[(side, san_move.castle)]
        mv = find_pseudo_move(board, king_from, king_to)
        return board.apply(mv) if mv is not None else None

    if san_move.to_sq is None:
        return None

    results: List["Board"] = []
    for sq in _candidate_origins(board, san_move):
        mv = find_pseudo_move(board, sq, san_move.to_sq, san_move.promotion)
        if mv is None:
            continue
        child = board.apply(mv)
        if child is None:
            continue
        if not strict:
            return child
        results.append(child)

    if len(results) > 1:
        logger.debug("ambiguous SAN descriptor %s: %d candidates", san_move, len(results))
        return None
    return results[0] if results else None


def move_san(board: "Board", san: str, strict: bool = False) -> Optional["Board"]:
    """Parse ``san`` and apply it to ``board``; None if unparseable or illegal."""
    san_move = parse_san(san)
    if san_move is None:
        return None
    return resolve_san(board, san_move, strict=strict)


def _index_or_none(names: str, ch: Optional[str]) -> Optional[int]:
    return names.index(ch) if ch else None


def _candidate_origins(board: "Board", san_move: SanMove) -> List[int]:
    side = board.side_to_move
    origins = []
    for sq, occupant in enumerate(board.squares):
        if occupant is None or occupant.color != side or occupant.kind != san_move.piece:
            continue
        if san_move.from_file is not None and file_of(sq) != san_move.from_file:
            continue
        if san_move.from_rank is not None and rank_of(sq) != san_move.from_rank:
            continue
        origins.append(sq)
    return origins
