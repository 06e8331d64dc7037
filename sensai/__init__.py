"""SENSAI career coaching platform"""

__version__ = "1.0.0"
