"""Puyo-style chain puzzle engine with a gymnasium environment and pygame front end."""

__version__ = "0.1.0"
