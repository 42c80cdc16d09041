from __future__ import annotations

from typing import Optional, Tuple


# Squares are 0..63 (a8=0 .. h8=7 .. a1=56 .. h1=63), rank-major from black's side.
A8, B8, C8, D8, E8, F8, G8, H8 = range(0, 8)
A1, B1, C1, D1, E1, F1, G1, H1 = range(56, 64)

OFF_BOARD = -1

# 10x12 mailbox: two sentinel ranks above and below, one sentinel file on each side.
MAILBOX: Tuple[int, ...] = (
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
    -1, 0, 1, 2, 3, 4, 5, 6, 7, -1,
    -1, 8, 9, 10, 11, 12, 13, 14, 15, -1,
    -1, 16, 17, 18, 19, 20, 21, 22, 23, -1,
    -1, 24, 25, 26, 27, 28, 29, 30, 31, -1,
    -1, 32, 33, 34, 35, 36, 37, 38, 39, -1,
    -1, 40, 41, 42, 43, 44, 45, 46, 47, -1,
    -1, 48, 49, 50, 51, 52, 53, 54, 55, -1,
    -1, 56, 57, 58, 59, 60, 61, 62, 63, -1,
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
)

# Board square -> mailbox index.
MAILBOX64: Tuple[int, ...] = tuple(21 + 10 * (sq >> 3) + (sq & 7) for sq in range(64))

# Mailbox offsets, indexed by Piece value (PAWN entries unused: pawns use PAWN_* below).
PIECE_OFFSETS: Tuple[Tuple[int, ...], ...] = (
    (),
    (-21, -19, -12, -8, 8, 12, 19, 21),
    (-11, -9, 9, 11),
    (-10, -1, 1, 10),
    (-11, -10, -9, -1, 1, 9, 10, 11),
    (-11, -10, -9, -1, 1, 9, 10, 11),
)
SLIDES: Tuple[bool, ...] = (False, False, True, True, True, False)

# Indexed by Color value: white advances toward lower square indices.
PAWN_PUSH: Tuple[int, int] = (-10, 10)
PAWN_CAPTURES: Tuple[Tuple[int, int], Tuple[int, int]] = ((-11, -9), (9, 11))

# Castling rights surviving a move that touches the square (ANDed for source and
# destination). Bits: 1=K, 2=Q, 4=k, 8=q.
CASTLE_MASK: Tuple[int, ...] = (
    7, 15, 15, 15, 3, 15, 15, 11,
    15, 15, 15, 15, 15, 15, 15, 15,
    15, 15, 15, 15, 15, 15, 15, 15,
    15, 15, 15, 15, 15, 15, 15, 15,
    15, 15, 15, 15, 15, 15, 15, 15,
    15, 15, 15, 15, 15, 15, 15, 15,
    15, 15, 15, 15, 15, 15, 15, 15,
    13, 15, 15, 15, 12, 15, 15, 14,
)


def step(sq: int, offset: int) -> int:
    """Return the square reached from ``sq`` by a mailbox ``offset``.

    Returns ``OFF_BOARD`` when the step leaves the board, including steps
    that would otherwise wrap from the a-file to the h-file.
    """
    return MAILBOX[MAILBOX64[sq] + offset]


def rank_of(sq: int) -> int:
    """Rank index 0..7 where 0 is rank 1."""
    return (sq >> 3) ^ 7


def file_of(sq: int) -> int:
    """File index 0..7 where 0 is the a-file."""
    return sq & 7


def square_at(file: int, rank: int) -> Optional[int]:
    if not (0 <= file < 8 and 0 <= rank < 8):
        return None
    return file | ((rank ^ 7) << 3)
