# Query parsing layer.

from .parser import ParsedQuery, parse_nl, resolve_target

__all__ = ["ParsedQuery", "parse_nl", "resolve_target"]
