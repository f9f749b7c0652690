"""Static type checker for a small TypeScript-like language."""

from loguru import logger

from tinyts.core import Context, TypeAlias, TypeChecker, TypeCheckError, expand_aliases, typecheck

__all__ = [
    "Context",
    "TypeAlias",
    "TypeCheckError",
    "TypeChecker",
    "expand_aliases",
    "typecheck",
]

logger.disable("tinyts")
