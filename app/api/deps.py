from fastapi import Request

from app.services.board import MemoryBoard
from app.services.capture_booth import CaptureBooth


def get_board(request: Request) -> MemoryBoard:
    return request.app.state.board


def get_capture_booth(request: Request) -> CaptureBooth:
    return request.app.state.capture_booth
