"""Programmatic entry points."""

from .run import SessionResult, collect_from_config

__all__ = ["SessionResult", "collect_from_config"]
