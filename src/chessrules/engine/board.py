from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .attacks import is_attacked, is_in_check
from .errors import MalformedInputError
from .geometry import (
    A1,
    A8,
    B1,
    B8,
    C1,
    C8,
    CASTLE_MASK,
    D1,
    D8,
    E1,
    E8,
    F1,
    F8,
    G1,
    G8,
    H1,
    H8,
    rank_of,
)
from .move import (
    CASTLING_LETTERS,
    CastlingRights,
    Color,
    ColoredPiece,
    Move,
    MoveFlag,
    Piece,
    parse_lan,
    parse_square,
    square_name,
)
from .movegen import find_pseudo_move, generate_pseudo_moves


logger = logging.getLogger(__name__)

STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

CHAR_TO_PIECE: Dict[str, ColoredPiece] = {
    ch: ColoredPiece(Color.WHITE if ch.isupper() else Color.BLACK, Piece.from_letter(ch))
    for ch in "PNBRQKpnbrqk"
}

# Move counters: non-negative ASCII decimal integers.
COUNTER_RE = re.compile(r"[0-9]+")

SIDE_TO_CHAR = {Color.WHITE: "w", Color.BLACK: "b"}
CHAR_TO_SIDE = {v: k for k, v in SIDE_TO_CHAR.items()}

# king destination -> (rook from, rook to, squares that must be empty, squares that must be safe)
CASTLE_ROUTES: Dict[int, Tuple[int, int, Tuple[int, ...], Tuple[int, ...]]] = {
    G1: (H1, F1, (F1, G1), (F1, G1)),
    C1: (A1, D1, (B1, C1, D1), (D1, C1)),
    G8: (H8, F8, (F8, G8), (F8, G8)),
    C8: (A8, D8, (B8, C8, D8), (D8, C8)),
}

Squares = Tuple[Optional[ColoredPiece], ...]


@dataclass(frozen=True)
class Board:
    """Immutable chess position with FEN I/O and move application.

    Notes:
    - Squares are 0..63 (a8=0 .. h1=63), rank-major from black's side.
    - Every transition returns a new Board; instances are never mutated and
      may be shared freely between threads.
    - ``in_check`` is derived from the placement on construction.
    """

    squares: Squares
    side_to_move: Color
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int
    in_check: bool = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.squares) != 64:
            raise ValueError("board must have 64 squares")
        object.__setattr__(self, "in_check", is_in_check(self.squares, self.side_to_move))

    @property
    def other_side(self) -> Color:
        return self.side_to_move.flip()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position.

        Returns:
            Board: Board instance representing the standard starting position.
        """
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): Six space-separated fields: placement, side to move,
                castling rights, en passant square, halfmove clock and
                fullmove number.

        Returns:
            Board: Board instance initialized with state encoded in ``fen``.

        Raises:
            MalformedInputError: If ``fen`` has the wrong number of fields or
                contains invalid piece placement, side to move, castling
                rights, en passant square, or move counters.
        """
        if not isinstance(fen, str) or not fen:
            raise MalformedInputError("FEN must be a non-empty string")
        parts = fen.split(" ")
        if len(parts) != 6:
            raise MalformedInputError("FEN must have 6 fields")
        placement, stm, castling_field, ep, halfmove, fullmove = parts

        squares = _parse_placement(placement)

        if stm not in CHAR_TO_SIDE:
            raise MalformedInputError(f"side to move must be 'w' or 'b', got {stm!r}")

        castling = CastlingRights.NONE
        if castling_field != "-":
            if not castling_field:
                raise MalformedInputError("empty castling field")
            letters = dict((ch, flag) for flag, ch in CASTLING_LETTERS)
            for ch in castling_field:
                if ch not in letters:
                    raise MalformedInputError(f"invalid castling right: {ch!r}")
                if castling & letters[ch]:
                    raise MalformedInputError(f"duplicate castling right: {ch!r}")
                castling |= letters[ch]

        ep_square: Optional[int] = None
        if ep != "-":
            ep_square = parse_square(ep)
            # rank 6 after a black double push (white to move), rank 3 after a white one
            if rank_of(ep_square) != (5 if stm == "w" else 2):
                raise MalformedInputError(
                    f"en passant square {ep} does not match side to move {stm!r}"
                )

        if not (COUNTER_RE.fullmatch(halfmove) and COUNTER_RE.fullmatch(fullmove)):
            raise MalformedInputError("invalid move counters in FEN")

        return cls(
            squares=squares,
            side_to_move=CHAR_TO_SIDE[stm],
            castling=castling,
            ep_square=ep_square,
            halfmove_clock=int(halfmove),
            fullmove_number=int(fullmove),
        )

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string.

        Returns:
            str: FEN string describing the board state.
        """
        rows: List[str] = []
        for start in range(0, 64, 8):
            run = 0
            row = []
            for occupant in self.squares[start : start + 8]:
                if occupant is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(occupant.symbol)
            if run > 0:
                row.append(str(run))
            rows.append("".join(row))
        placement = "/".join(rows)

        castling = "".join(ch for flag, ch in CASTLING_LETTERS if self.castling & flag) or "-"
        ep = square_name(self.ep_square) if self.ep_square is not None else "-"
        stm = SIDE_TO_CHAR[self.side_to_move]
        return f"{placement} {stm} {castling} {ep} {self.halfmove_clock} {self.fullmove_number}"

    def piece_at(self, sq: int) -> Optional[ColoredPiece]:
        return self.squares[sq]

    def pieces(self) -> List[Optional[str]]:
        """Return renderer codes (``"wp"``, ``"bk"``, ...) for all 64 squares."""
        return [p.code if p is not None else None for p in self.squares]

    def is_attacked(self, sq: int, by_side: Color) -> bool:
        return is_attacked(self.squares, sq, by_side)

    def is_side_in_check(self, side: Color) -> bool:
        return is_in_check(self.squares, side)

    # --- Move generation ---
    def pseudo_moves(self) -> List[Move]:
        return generate_pseudo_moves(self)

    def legal_moves(self) -> List[Move]:
        """Return the pseudo-legal moves that ``apply`` accepts."""
        return [mv for mv, _ in self.legal_successors()]

    def legal_successors(self) -> List[Tuple[Move, "Board"]]:
        """Return ``(move, resulting board)`` for every legal move."""
        result: List[Tuple[Move, Board]] = []
        for mv in generate_pseudo_moves(self):
            child = self.apply(mv)
            if child is not None:
                result.append((mv, child))
        return result

    def has_legal_moves(self) -> bool:
        return any(self.apply(mv) is not None for mv in generate_pseudo_moves(self))

    def is_checkmate(self) -> bool:
        return self.in_check and not self.has_legal_moves()

    def is_stalemate(self) -> bool:
        return not self.in_check and not self.has_legal_moves()

    def same_position(self, other: "Board") -> bool:
        """Return True if both boards count as the same position for repetition.

        Compares placement, side to move, castling rights and en passant
        square; move counters are ignored.
        """
        return (
            self.squares == other.squares
            and self.side_to_move == other.side_to_move
            and self.castling == other.castling
            and self.ep_square == other.ep_square
        )

    # --- State transition ---
    def apply(self, move: Move) -> Optional["Board"]:
        """Return the board after ``move``, or None if the move is illegal.

        ``move`` is expected to be a pseudo-legal candidate for this board.
        Castling is validated here (not in check, clear path, no attacked
        transit square), as is the rule that the mover may not leave its own
        king attacked. The original board is never modified.
        """
        squares = list(self.squares)
        side = self.side_to_move
        opponent = side.flip()
        moving = squares[move.from_sq]
        if moving is None or moving.color != side:
            logger.debug("rejecting %s: no own piece on origin", move.to_lan())
            return None

        if move.flags & MoveFlag.CASTLE:
            route = CASTLE_ROUTES.get(move.to_sq)
            if route is None or not self._can_castle(move, route):
                logger.debug("rejecting castle %s", move.to_lan())
                return None
            rook_from, rook_to, _, _ = route
            squares[rook_to] = squares[rook_from]
            squares[rook_from] = None

        fullmove = self.fullmove_number + 1 if side == Color.BLACK else self.fullmove_number
        castling = CastlingRights(
            self.castling & CASTLE_MASK[move.from_sq] & CASTLE_MASK[move.to_sq]
        )

        ep_square: Optional[int] = None
        if move.flags & MoveFlag.DOUBLE_PAWN_PUSH:
            ep_square = move.to_sq + 8 if side == Color.WHITE else move.to_sq - 8

        if move.flags & (MoveFlag.PAWN_MOVE | MoveFlag.CAPTURE):
            halfmove = 0
        else:
            halfmove = self.halfmove_clock + 1

        if move.flags & MoveFlag.PROMOTION and move.promotion is not None:
            squares[move.to_sq] = ColoredPiece(side, move.promotion)
        else:
            squares[move.to_sq] = moving
        squares[move.from_sq] = None

        if move.flags & MoveFlag.EN_PASSANT:
            captured_sq = move.to_sq + 8 if side == Color.WHITE else move.to_sq - 8
            squares[captured_sq] = None

        if is_in_check(squares, side):
            logger.debug("rejecting %s: leaves own king in check", move.to_lan())
            return None

        return Board(
            squares=tuple(squares),
            side_to_move=opponent,
            castling=castling,
            ep_square=ep_square,
            halfmove_clock=halfmove,
            fullmove_number=fullmove,
        )

    def apply_lan(self, lan: str) -> Optional["Board"]:
        """Apply a move given in long algebraic notation.

        Raises:
            MalformedInputError: If ``lan`` cannot be parsed.
        """
        from_sq, to_sq, promotion = parse_lan(lan)
        mv = find_pseudo_move(self, from_sq, to_sq, promotion)
        if mv is None:
            logger.debug("rejecting %s: not a pseudo-legal move", lan)
            return None
        return self.apply(mv)

    def _can_castle(
        self, move: Move, route: Tuple[int, int, Tuple[int, ...], Tuple[int, ...]]
    ) -> bool:
        rook_from, _, must_be_empty, must_be_safe = route
        side = self.side_to_move
        if self.in_check:
            return False
        if self.squares[move.from_sq] != ColoredPiece(side, Piece.KING):
            return False
        if self.squares[rook_from] != ColoredPiece(side, Piece.ROOK):
            return False
        if any(self.squares[sq] is not None for sq in must_be_empty):
            return False
        return not any(is_attacked(self.squares, sq, side.flip()) for sq in must_be_safe)


def _parse_placement(placement: str) -> Squares:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise MalformedInputError("FEN board must have 8 ranks")
    squares: List[Optional[ColoredPiece]] = []
    for rank in ranks:
        file_idx = 0
        for ch in rank:
            if ch in "12345678":
                file_idx += int(ch)
                squares.extend([None] * int(ch))
            elif ch in CHAR_TO_PIECE:
                file_idx += 1
                squares.append(CHAR_TO_PIECE[ch])
            else:
                raise MalformedInputError(f"invalid character in FEN placement: {ch!r}")
            if file_idx > 8:
                raise MalformedInputError("too many squares in FEN rank")
        if file_idx != 8:
            raise MalformedInputError("rank does not sum to 8 squares in FEN")
    return tuple(squares)
