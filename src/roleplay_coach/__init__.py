"""
Roleplay conversation trainer.

This package runs scripted workplace conversations with a character, scores the player's
answers against a keyword rubric (required, bonus and forbidden terms) and keeps track of
best scores, experience points and level between sessions.
"""

from importlib import resources

from .config.loader import load_settings

__all__ = ["load_settings", "resources"]
