"""Version of the casewalk distribution."""

__version__ = "0.1.0"
