"""Hide-and-seek round server: hider deck, question/draw cycle and powerups."""

__version__ = "0.1.0"
