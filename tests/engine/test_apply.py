from __future__ import annotations

from chessrules.engine.board import Board, STARTPOS_FEN
from chessrules.engine.move import Color, ColoredPiece, Move, MoveFlag, Piece, parse_square
from chessrules.engine.movegen import find_pseudo_move, generate_pseudo_moves


def test_apply_returns_new_board_and_does_not_mutate() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    mv = find_pseudo_move(b, parse_square("e2"), parse_square("e4"))
    assert mv is not None

    b2 = b.apply(mv)
    assert b2 is not None

    # Original board unchanged
    assert b.to_fen() == STARTPOS_FEN

    # New board reflects move; halfmove reset, ep square set, side toggled
    assert b2.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


def test_apply_lan_rejects_geometrically_impossible_move() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    # e2e5 is not a pawn move at all
    assert b.apply_lan("e2e5") is None
    # Moving the opponent's piece is not possible either
    assert b.apply_lan("e7e5") is None


def test_pinned_piece_move_is_pseudo_legal_but_rejected() -> None:
    # White knight on e2 pinned against the king by the rook on e8
    b = Board.from_fen("4r1k1/8/8/8/8/8/4N3/4K3 w - - 0 1")
    knight_moves = [m for m in generate_pseudo_moves(b) if m.from_sq == parse_square("e2")]
    assert knight_moves
    assert all(b.apply(m) is None for m in knight_moves)
    assert not any(m.from_sq == parse_square("e2") for m in b.legal_moves())


def test_king_cannot_step_into_attack() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3r4/4K3 w - - 0 1")
    ms = {m.to_lan() for m in b.legal_moves()}
    # Rook on d2 covers d1, e2 (rank 2) and the whole d-file; capturing it is fine
    assert "e1d2" in ms
    assert "e1e2" not in ms
    assert "e1f2" not in ms
    assert "e1d1" not in ms
    assert "e1f1" in ms


def test_move_giving_check_sets_in_check_for_opponent() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    child = b.apply_lan("a1a8")
    assert child is not None
    assert child.side_to_move == Color.BLACK
    assert child.in_check


def test_rejected_move_leaves_original_untouched() -> None:
    fen = "4r1k1/8/8/8/8/8/4N3/4K3 w - - 0 1"
    b = Board.from_fen(fen)
    assert b.apply_lan("e2c3") is None
    assert b.to_fen() == fen


def test_apply_with_empty_origin_is_rejected() -> None:
    b = Board.startpos()
    assert b.apply(Move(parse_square("e4"), parse_square("e5"))) is None


def test_capture_replaces_piece() -> None:
    b = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 3 10")
    child = b.apply_lan("e4d5")
    assert child is not None
    assert child.piece_at(parse_square("d5")) == ColoredPiece(Color.WHITE, Piece.PAWN)
    assert child.piece_at(parse_square("e4")) is None
    assert child.halfmove_clock == 0


def test_legal_successors_match_legal_moves() -> None:
    b = Board.from_fen("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")
    pairs = b.legal_successors()
    assert [m for m, _ in pairs] == b.legal_moves()
    assert all(child.side_to_move == Color.BLACK for _, child in pairs)


def test_checkmate_and_stalemate() -> None:
    mate = Board.from_fen("R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1")
    assert mate.in_check and mate.is_checkmate() and not mate.is_stalemate()
    stale = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert not stale.in_check and stale.is_stalemate() and not stale.is_checkmate()
    assert Board.startpos().has_legal_moves()


def test_same_position_ignores_counters() -> None:
    a = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    b = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 12 40")
    assert a.same_position(b)
    assert not a.same_position(Board.from_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 1"))


def test_knight_shuffle_repeats_position() -> None:
    b = Board.startpos()
    for lan in ("g1f3", "g8f6", "f3g1", "f6g8"):
        nxt = b.apply_lan(lan)
        assert nxt is not None
        b = nxt
    assert b.same_position(Board.startpos())
    assert b.halfmove_clock == 4
    assert b.fullmove_number == 3


def test_pieces_lists_renderer_codes() -> None:
    codes = Board.startpos().pieces()
    assert len(codes) == 64
    assert codes[0] == "br" and codes[4] == "bk" and codes[60] == "wk"
    assert codes[8] == "bp" and codes[48] == "wp"
    assert codes[20] is None


def test_flags_drive_halfmove_reset() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 7 1")
    mv = find_pseudo_move(b, parse_square("a1"), parse_square("a2"))
    assert mv is not None and mv.flags == MoveFlag.NONE
    child = b.apply(mv)
    assert child is not None and child.halfmove_clock == 8
