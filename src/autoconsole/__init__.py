"""Explore and manipulate a live object graph from a prompt."""

__all__ = [
    "context",
    "demo",
    "evaluator",
    "literals",
    "members",
    "render",
    "repl",
    "repl_highlight",
    "runner",
    "scanner",
    "types",
    "utils",
]
