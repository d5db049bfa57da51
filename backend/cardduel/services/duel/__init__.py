"""Duel domain services: deck, scoring, matchmaking, timers and the engine.

This package holds the game rules and room lifecycle and is imported by
socket handlers and HTTP routes, keeping transport concerns separated
from core game mechanics.
"""
