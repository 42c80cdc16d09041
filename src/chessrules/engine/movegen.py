from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .geometry import (
    C1,
    C8,
    E1,
    E8,
    G1,
    G8,
    OFF_BOARD,
    PAWN_CAPTURES,
    PAWN_PUSH,
    PIECE_OFFSETS,
    SLIDES,
    rank_of,
    step,
)
from .move import PROMOTION_PIECES, CastlingRights, Color, Move, MoveFlag, Piece

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


PAWN_HOME_RANK = (1, 6)
PROMOTION_RANK = (7, 0)


def generate_pseudo_moves(board: "Board") -> List[Move]:
    """Return all pseudo-legal moves for the side to move.

    Moves obey piece geometry but may leave the mover's king in check;
    castling is emitted on rights alone and validated by ``Board.apply``.

    Order: board scan (a8..h1), then castling, then en passant captures.
    """
    moves: List[Move] = []
    squares = board.squares
    side = board.side_to_move

    for sq, occupant in enumerate(squares):
        if occupant is None or occupant.color != side:
            continue
        if occupant.kind == Piece.PAWN:
            for offset in PAWN_CAPTURES[side]:
                to_sq = step(sq, offset)
                if to_sq == OFF_BOARD:
                    continue
                target = squares[to_sq]
                if target is not None and target.color != side:
                    _add_pawn_move(moves, side, sq, to_sq, MoveFlag.PAWN_MOVE | MoveFlag.CAPTURE)
            one = step(sq, PAWN_PUSH[side])
            if one != OFF_BOARD and squares[one] is None:
                _add_pawn_move(moves, side, sq, one, MoveFlag.PAWN_MOVE)
                if rank_of(sq) == PAWN_HOME_RANK[side]:
                    two = step(one, PAWN_PUSH[side])
                    if squares[two] is None:
                        moves.append(
                            Move(sq, two, MoveFlag.PAWN_MOVE | MoveFlag.DOUBLE_PAWN_PUSH)
                        )
            continue

        slides = SLIDES[occupant.kind]
        for offset in PIECE_OFFSETS[occupant.kind]:
            n = sq
            while True:
                n = step(n, offset)
                if n == OFF_BOARD:
                    break
                target = squares[n]
                if target is not None:
                    if target.color != side:
                        moves.append(Move(sq, n, MoveFlag.CAPTURE))
                    break
                moves.append(Move(sq, n))
                if not slides:
                    break

    moves.extend(_castling_candidates(board))
    moves.extend(_en_passant_candidates(board))
    return moves


def find_pseudo_move(
    board: "Board", from_sq: int, to_sq: int, promotion: Optional[Piece] = None
) -> Optional[Move]:
    """Return the pseudo-legal move matching the squares and promotion, if any.

    A pawn reaching the last rank only matches when ``promotion`` names the
    piece; any other move only matches without a promotion.
    """
    for mv in generate_pseudo_moves(board):
        if mv.from_sq == from_sq and mv.to_sq == to_sq and mv.promotion == promotion:
            return mv
    return None


def _add_pawn_move(
    moves: List[Move], side: Color, from_sq: int, to_sq: int, flags: MoveFlag
) -> None:
    if rank_of(to_sq) == PROMOTION_RANK[side]:
        for piece in PROMOTION_PIECES:
            moves.append(Move(from_sq, to_sq, flags | MoveFlag.PROMOTION, piece))
    else:
        moves.append(Move(from_sq, to_sq, flags))


def _castling_candidates(board: "Board") -> List[Move]:
    rights = board.castling
    if board.side_to_move == Color.WHITE:
        options = ((CastlingRights.WHITE_KING, E1, G1), (CastlingRights.WHITE_QUEEN, E1, C1))
    else:
        options = ((CastlingRights.BLACK_KING, E8, G8), (CastlingRights.BLACK_QUEEN, E8, C8))
    return [
        Move(king_from, king_to, MoveFlag.CASTLE)
        for flag, king_from, king_to in options
        if rights & flag
    ]


def _en_passant_candidates(board: "Board") -> List[Move]:
    ep = board.ep_square
    if ep is None:
        return []
    side = board.side_to_move
    moves: List[Move] = []
    # Own pawns that capture onto ep sit one capture step "behind" it.
    for offset in PAWN_CAPTURES[side.flip()]:
        origin = step(ep, offset)
        if origin == OFF_BOARD:
            continue
        occupant = board.squares[origin]
        if occupant is not None and occupant.color == side and occupant.kind == Piece.PAWN:
            moves.append(
                Move(origin, ep, MoveFlag.CAPTURE | MoveFlag.PAWN_MOVE | MoveFlag.EN_PASSANT)
            )
    return moves
