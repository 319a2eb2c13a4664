from .log_sink import LogSink, MemorySink, NullSink
from .trace_emitter import TraceEmitter
from .trace_store_jsonl import TraceStoreJSONL
from .replay import Replay

__all__ = ["LogSink", "MemorySink", "NullSink", "TraceEmitter", "TraceStoreJSONL", "Replay"]
