from __future__ import annotations

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children come from ``Board.legal_successors`` so every count exercises
    generation, legality filtering and move application together.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if depth == 1:
        return len(board.legal_successors())

    nodes = 0
    for _, child in board.legal_successors():
        nodes += perft(child, depth - 1)
    return nodes


def divide(board: Board, depth: int) -> dict[str, int]:
    """Return the perft count below each legal root move, keyed by LAN."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    return {mv.to_lan(): perft(child, depth - 1) for mv, child in board.legal_successors()}
