"""CineMood - mood-based movie recommendations."""

__version__ = "0.1.0"
