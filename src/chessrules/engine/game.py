from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .board import Board
from .move import MoveText
from .notation import SAN_PLACEHOLDER, move_san


logger = logging.getLogger(__name__)

CHECKMATE = "checkmate"
STALEMATE = "stalemate"


@dataclass(frozen=True)
class GameState:
    """Public state returned to the caller after every call.

    The caller owns the position: ``board`` is a FEN string that must be
    passed back in to continue from this state.
    """

    board: str
    allowed_moves: List[MoveText]
    side_to_move: str  # 'white' or 'black'
    in_check: bool
    message: Optional[str]
    pieces: List[Optional[str]]

    @classmethod
    def from_board(cls, board: Board) -> "GameState":
        successors = board.legal_successors()
        message: Optional[str] = None
        if not successors:
            message = CHECKMATE if board.in_check else STALEMATE
        return cls(
            board=board.to_fen(),
            allowed_moves=[MoveText(lan=mv.to_lan(), san=SAN_PLACEHOLDER) for mv, _ in successors],
            side_to_move=board.side_to_move.label,
            in_check=board.in_check,
            message=message,
            pieces=board.pieces(),
        )


def first(initial_fen: Optional[str] = None) -> GameState:
    """Return the state for ``initial_fen``, or for the start position if None.

    Raises:
        MalformedInputError: If ``initial_fen`` is not a valid FEN string.
    """
    board = Board.startpos() if initial_fen is None else Board.from_fen(initial_fen)
    return GameState.from_board(board)


def apply_move(board_fen: str, move: Union[MoveText, str]) -> Optional[GameState]:
    """Apply a long algebraic move to the position ``board_fen``.

    Args:
        board_fen (str): Current position as FEN.
        move (Union[MoveText, str]): Move pair (only ``lan`` is read) or a
            bare LAN string such as ``"e2e4"`` or ``"e7e8=Q"``.

    Returns:
        Optional[GameState]: Resulting state, or None if the move is illegal
            in this position.

    Raises:
        MalformedInputError: If the FEN or LAN text cannot be parsed.
    """
    lan = move.lan if isinstance(move, MoveText) else move
    child = Board.from_fen(board_fen).apply_lan(lan)
    if child is None:
        logger.info("illegal move %s for %s", lan, board_fen)
        return None
    return GameState.from_board(child)


def apply_san(board_fen: str, san: str, strict: bool = False) -> Optional[GameState]:
    """Apply a short algebraic move to the position ``board_fen``.

    Returns None if ``san`` does not parse or does not resolve to a legal
    move (see ``notation.resolve_san`` for disambiguation rules).
    """
    child = move_san(Board.from_fen(board_fen), san, strict=strict)
    if child is None:
        logger.info("unresolved SAN move %s for %s", san, board_fen)
        return None
    return GameState.from_board(child)
