from .logging import build_log_context, log_event

__all__ = ["build_log_context", "log_event"]
