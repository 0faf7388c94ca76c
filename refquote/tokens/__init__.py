"""Token symbol resolution."""

from refquote.tokens.resolver import TokenResolver, coerce_network

__all__ = ["TokenResolver", "coerce_network"]
