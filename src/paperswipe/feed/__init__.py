from .buffer import PREFETCH_THRESHOLD, BufferState, FeedBuffer

__all__ = ["PREFETCH_THRESHOLD", "BufferState", "FeedBuffer"]
