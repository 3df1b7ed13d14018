"""Gameplay services layered over the dungeon core."""
