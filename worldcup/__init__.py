"""World Cup team board."""

__version__ = "0.1.0"
