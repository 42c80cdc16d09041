from __future__ import annotations

from typing import Optional, Sequence

from .geometry import OFF_BOARD, PAWN_CAPTURES, PIECE_OFFSETS, SLIDES, step
from .move import Color, ColoredPiece, Piece


Squares = Sequence[Optional[ColoredPiece]]


def is_attacked(squares: Squares, sq: int, by_side: Color) -> bool:
    """Return True if square ``sq`` is attacked by any piece of ``by_side``.

    Every square held by ``by_side`` is tested for reachability: pawns along
    their two forward diagonals, knights and kings one step along their
    offsets, sliders ray by ray until the first occupied square.
    """
    for origin, occupant in enumerate(squares):
        if occupant is None or occupant.color != by_side:
            continue
        if occupant.kind == Piece.PAWN:
            for offset in PAWN_CAPTURES[by_side]:
                if step(origin, offset) == sq:
                    return True
            continue
        slides = SLIDES[occupant.kind]
        for offset in PIECE_OFFSETS[occupant.kind]:
            n = origin
            while True:
                n = step(n, offset)
                if n == OFF_BOARD:
                    break
                if n == sq:
                    return True
                if squares[n] is not None or not slides:
                    break
    return False


def find_king(squares: Squares, side: Color) -> Optional[int]:
    for sq, occupant in enumerate(squares):
        if occupant is not None and occupant.kind == Piece.KING and occupant.color == side:
            return sq
    return None


def is_in_check(squares: Squares, side: Color) -> bool:
    """Return True if ``side``'s king is attacked by the opponent.

    A side without a king on the board is never in check.
    """
    king_sq = find_king(squares, side)
    if king_sq is None:
        return False
    return is_attacked(squares, king_sq, side.flip())
