"""statgraph – windowed statistics series extraction for monitoring charts."""

__version__ = "0.1.0"
