"""Side-effect parking package exports."""

from .models import SideEffectFailure, SideEffectFailureStatus, SideEffectKind

__all__ = ["SideEffectFailure", "SideEffectFailureStatus", "SideEffectKind"]
