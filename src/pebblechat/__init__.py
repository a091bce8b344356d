"""pebblechat - chat with Claude from a Pebble watch."""

from pebblechat.orchestrator import ChatOrchestrator
from pebblechat.reducer import reduce_blocks
from pebblechat.request import build_request
from pebblechat.transcript import Role, Turn, decode, encode

__version__ = "0.1.0"

__all__ = ["ChatOrchestrator", "Role", "Turn", "build_request", "decode", "encode", "reduce_blocks"]
