"""A small command shell: lexing, expansion, parsing, here-documents, builtins and pipeline execution."""

__version__ = "0.1.0"

__all__ = [
    "builtins",
    "environment",
    "errors",
    "executor",
    "expand",
    "heredoc",
    "lexer",
    "parser",
    "tokens",
]