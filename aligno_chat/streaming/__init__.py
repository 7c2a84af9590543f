"""Decoding of streamed AI chat responses."""

from aligno_chat.streaming.decoder import StreamingChatDecoder, extract_delta_content
from aligno_chat.streaming.models import DecoderState, StreamOutcome, StreamResult

__all__ = ["DecoderState", "StreamOutcome", "StreamResult", "StreamingChatDecoder", "extract_delta_content"]
