"""humangate - human verification gate for anonymous form submissions."""

__version__ = "0.1.0"
