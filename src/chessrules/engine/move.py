from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import NamedTuple, Optional, Tuple

from .errors import MalformedInputError
from .geometry import file_of, rank_of, square_at


FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"
PIECE_LETTERS = "PNBRQK"


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    def flip(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def label(self) -> str:
        """Lowercase color name, e.g. ``"white"``."""
        return self.name.lower()


class Piece(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    @property
    def letter(self) -> str:
        return PIECE_LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> "Piece":
        idx = PIECE_LETTERS.find(letter.upper()) if len(letter) == 1 else -1
        if idx < 0:
            raise MalformedInputError(f"invalid piece letter: {letter!r}")
        return cls(idx)


PROMOTION_PIECES: Tuple[Piece, ...] = (Piece.KNIGHT, Piece.BISHOP, Piece.ROOK, Piece.QUEEN)


class ColoredPiece(NamedTuple):
    color: Color
    kind: Piece

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        letter = self.kind.letter
        return letter if self.color is Color.WHITE else letter.lower()

    @property
    def code(self) -> str:
        """Renderer code such as ``"wp"`` or ``"bk"``."""
        return self.color.label[0] + self.kind.letter.lower()


class CastlingRights(IntFlag):
    NONE = 0
    WHITE_KING = 1
    WHITE_QUEEN = 2
    BLACK_KING = 4
    BLACK_QUEEN = 8
    ALL = 15


CASTLING_LETTERS = (
    (CastlingRights.WHITE_KING, "K"),
    (CastlingRights.WHITE_QUEEN, "Q"),
    (CastlingRights.BLACK_KING, "k"),
    (CastlingRights.BLACK_QUEEN, "q"),
)


class MoveFlag(IntFlag):
    NONE = 0
    CAPTURE = 1
    CASTLE = 2
    EN_PASSANT = 4
    DOUBLE_PAWN_PUSH = 8
    PAWN_MOVE = 16
    PROMOTION = 32


@dataclass(frozen=True)
class Move:
    """Candidate move produced by the generator and consumed by ``Board.apply``.

    Attributes:
        from_sq (int): Origin square index (a8=0 .. h1=63).
        to_sq (int): Destination square index.
        flags (MoveFlag): Move properties (capture, castle, en passant, ...).
        promotion (Optional[Piece]): Promotion piece, if any.
    """

    from_sq: int
    to_sq: int
    flags: MoveFlag = MoveFlag.NONE
    promotion: Optional[Piece] = None

    def __post_init__(self) -> None:
        if self.promotion is not None and not self.flags & MoveFlag.PROMOTION:
            object.__setattr__(self, "flags", self.flags | MoveFlag.PROMOTION)

    def to_lan(self) -> str:
        """Serialize the move into long algebraic form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8=Q"``.
        """
        return to_lan(self.from_sq, self.to_sq, self.promotion)

    def is_capture(self) -> bool:
        return bool(self.flags & MoveFlag.CAPTURE)


class MoveText(NamedTuple):
    """Textual move pair exchanged with callers."""

    lan: str
    san: str


def to_lan(from_sq: int, to_sq: int, promotion: Optional[Piece] = None) -> str:
    suffix = "=" + promotion.letter if promotion is not None else ""
    return square_name(from_sq) + square_name(to_sq) + suffix


def parse_lan(lan: str) -> Tuple[int, int, Optional[Piece]]:
    """Parse a long algebraic move string.

    Args:
        lan (str): Move such as ``"e2e4"`` or ``"e7e8=Q"``.

    Returns:
        Tuple[int, int, Optional[Piece]]: Source square, destination square
            and promotion piece.

    Raises:
        MalformedInputError: If the length, squares or promotion suffix are
            invalid.
    """
    if len(lan) not in (4, 6):
        raise MalformedInputError(f"invalid LAN move length: {lan!r}")
    from_sq = parse_square(lan[0:2])
    to_sq = parse_square(lan[2:4])
    promotion: Optional[Piece] = None
    if len(lan) == 6:
        if lan[4] != "=":
            raise MalformedInputError(f"invalid LAN promotion suffix: {lan!r}")
        promotion = Piece.from_letter(lan[5])
        if promotion not in PROMOTION_PIECES:
            raise MalformedInputError(f"invalid promotion piece: {lan[5]!r}")
    return from_sq, to_sq, promotion


def parse_square(name: str) -> int:
    """Convert a square name such as ``"e4"`` into a square index.

    Raises:
        MalformedInputError: If ``name`` is not a valid square.
    """
    if len(name) != 2 or name[0] not in FILE_NAMES or name[1] not in RANK_NAMES:
        raise MalformedInputError(f"invalid square: {name!r}")
    sq = square_at(FILE_NAMES.index(name[0]), RANK_NAMES.index(name[1]))
    assert sq is not None
    return sq


def square_name(sq: int) -> str:
    """Convert a square index into its name.

    Raises:
        ValueError: If ``sq`` is outside 0..63.
    """
    if sq < 0 or sq > 63:
        raise ValueError(f"invalid square index: {sq}")
    return FILE_NAMES[file_of(sq)] + RANK_NAMES[rank_of(sq)]
