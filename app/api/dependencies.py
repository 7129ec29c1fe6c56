"""FastAPI dependencies for API routes."""

from fastapi import HTTPException, Request

from app.services.dispatch import DispatchEngine, MessageSender
from app.services.processed_messages import ProcessedMessageCache


def get_engine(request: Request) -> DispatchEngine:
    """Dispatch engine built at startup; 503 until it exists."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Dispatch engine not ready")
    return engine


def get_sender(request: Request) -> MessageSender:
    sender = getattr(request.app.state, "sender", None)
    if sender is None:
        raise HTTPException(status_code=503, detail="Message sender not ready")
    return sender


def get_processed_messages(request: Request) -> ProcessedMessageCache:
    cache = getattr(request.app.state, "processed_messages", None)
    if cache is None:
        raise HTTPException(status_code=503, detail="Message registry not ready")
    return cache
