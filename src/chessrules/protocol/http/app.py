from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    malformed_input_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.board import Board, STARTPOS_FEN
from ...engine.errors import MalformedInputError
from ...engine.game import GameState, apply_move, apply_san, first
from ...engine.move import MoveText
from ...engine.perft import perft as perft_nodes


logger = logging.getLogger(__name__)


class FirstRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN string; start position if omitted")


class MovePayload(BaseModel):
    lan: str = Field(..., description="Long algebraic move, e.g. e2e4 or e7e8=Q")
    san: Optional[str] = Field(default=None, description="Ignored; accepted for symmetry")


class ApplyMoveRequest(BaseModel):
    board: str = Field(..., description="Current position as FEN")
    move: MovePayload


class ApplySanRequest(BaseModel):
    board: str = Field(..., description="Current position as FEN")
    san: str = Field(..., description="Short algebraic move, e.g. Nf3 or exd5")
    strict: bool = Field(default=False, description="Reject ambiguous SAN instead of first match")


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN)
    depth: int = Field(default=1, ge=0, le=5)


class MoveModel(BaseModel):
    lan: str
    san: str


class PositionState(BaseModel):
    board: str
    allowed_moves: list[MoveModel]
    side_to_move: str
    in_check: bool
    message: Optional[str]
    pieces: list[Optional[str]]


def create_app(log_level: str = "info") -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    # Basic logging setup; the level also applies when the root logger was already configured
    logging.basicConfig()
    logging.getLogger().setLevel(log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(MalformedInputError, malformed_input_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/positions", response_model=PositionState)
    async def start_position(req: FirstRequest) -> PositionState:
        return _to_response(first(req.fen))

    @app.post("/api/positions/move", response_model=PositionState)
    async def make_move(req: ApplyMoveRequest) -> PositionState:
        state = apply_move(req.board, MoveText(lan=req.move.lan, san=req.move.san or ""))
        if state is None:
            raise HTTPException(status_code=400, detail="illegal move")
        return _to_response(state)

    @app.post("/api/positions/san", response_model=PositionState)
    async def make_san_move(req: ApplySanRequest) -> PositionState:
        state = apply_san(req.board, req.san, strict=req.strict)
        if state is None:
            raise HTTPException(status_code=400, detail="illegal move")
        return _to_response(state)

    # CPU-bound: a plain def so FastAPI runs it in the threadpool
    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        board = Board.from_fen(req.fen)
        return {"nodes": perft_nodes(board, req.depth)}

    return app


def _to_response(state: GameState) -> PositionState:
    return PositionState(
        board=state.board,
        allowed_moves=[MoveModel(lan=m.lan, san=m.san) for m in state.allowed_moves],
        side_to_move=state.side_to_move,
        in_check=state.in_check,
        message=state.message,
        pieces=state.pieces,
    )


# Default app for non-factory servers
app = create_app()
