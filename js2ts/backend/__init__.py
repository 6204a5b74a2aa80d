"""Backend package - renders the documented tree back to JavaScript text."""

from .adapter import DocAdapter, generate
from .codegen import Serializer, to_source

__all__ = ["DocAdapter", "Serializer", "generate", "to_source"]
