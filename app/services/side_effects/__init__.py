"""Side-effect emission exports."""

from .emitter import DurableRetryQueue, InMemoryRetryQueue, RetryQueue, SideEffectEmitter

__all__ = ["DurableRetryQueue", "InMemoryRetryQueue", "RetryQueue", "SideEffectEmitter"]
