from __future__ import annotations

import pytest

from chessrules.engine.board import STARTPOS_FEN
from chessrules.engine.errors import MalformedInputError
from chessrules.engine.game import CHECKMATE, STALEMATE, GameState, apply_move, apply_san, first
from chessrules.engine.move import MoveText


def _play(fen: str, *lans: str) -> GameState:
    state = None
    for lan in lans:
        state = apply_move(fen, lan)
        assert state is not None, lan
        fen = state.board
    assert state is not None
    return state


def test_first_defaults_to_start_position() -> None:
    state = first()
    assert state.board == STARTPOS_FEN
    assert state.side_to_move == "white"
    assert state.in_check is False
    assert state.message is None
    assert len(state.allowed_moves) == 20
    assert all(m.san == "?" for m in state.allowed_moves)
    assert {"e2e4", "g1f3", "b1a3"} <= {m.lan for m in state.allowed_moves}


def test_first_pieces_layout() -> None:
    pieces = first().pieces
    assert len(pieces) == 64
    assert pieces[0] == "br"
    assert pieces[4] == "bk"
    assert pieces[60] == "wk"
    assert pieces[52] == "wp"
    assert pieces[32:40] == [None] * 8


def test_first_with_custom_fen() -> None:
    fen = "4k3/8/8/8/8/8/8/4K2R b K - 3 40"
    state = first(fen)
    assert state.board == fen
    assert state.side_to_move == "black"


def test_first_rejects_malformed_fen() -> None:
    with pytest.raises(MalformedInputError):
        first("not a fen")


def test_apply_move_accepts_bare_lan_and_move_text() -> None:
    expected = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    by_lan = apply_move(STARTPOS_FEN, "e2e4")
    by_pair = apply_move(STARTPOS_FEN, MoveText(lan="e2e4", san="whatever"))
    assert by_lan is not None and by_pair is not None
    assert by_lan.board == expected
    assert by_pair == by_lan
    assert by_lan.side_to_move == "black"
    assert len(by_lan.allowed_moves) == 20


def test_apply_move_illegal_returns_none() -> None:
    assert apply_move(STARTPOS_FEN, "e2e5") is None
    assert apply_move(STARTPOS_FEN, "e7e5") is None


def test_apply_move_malformed_raises() -> None:
    with pytest.raises(MalformedInputError):
        apply_move(STARTPOS_FEN, "zz")
    with pytest.raises(MalformedInputError):
        apply_move("8/8/8 w - - 0 1", "e2e4")


def test_fools_mate_reports_checkmate() -> None:
    state = _play(STARTPOS_FEN, "f2f3", "e7e5", "g2g4", "d8h4")
    assert state.in_check is True
    assert state.message == CHECKMATE
    assert state.allowed_moves == []
    assert state.side_to_move == "white"


def test_stalemate_is_reported() -> None:
    state = first("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert state.in_check is False
    assert state.message == STALEMATE
    assert state.allowed_moves == []


def test_check_without_mate_has_no_message() -> None:
    state = _play(STARTPOS_FEN, "e2e4", "f7f6", "d1h5")
    assert state.in_check is True
    assert state.message is None
    assert {m.lan for m in state.allowed_moves} == {"g7g6"}


def test_apply_san() -> None:
    state = apply_san(STARTPOS_FEN, "Nf3")
    assert state is not None
    assert state.board == "rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b KQkq - 1 1"
    assert apply_san(STARTPOS_FEN, "Nf4") is None
    assert apply_san(STARTPOS_FEN, "garbage") is None


def test_apply_san_strict_rejects_ambiguity() -> None:
    fen = "4k3/8/8/8/8/8/8/1N2KN2 w - - 0 1"
    assert apply_san(fen, "Nd2") is not None
    assert apply_san(fen, "Nd2", strict=True) is None
    assert apply_san(fen, "Nfd2", strict=True) is not None
