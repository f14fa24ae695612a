"""Domain layer — the dungeon graph and the pure operations on it.

Nothing here performs I/O. Infrastructure and services build on top of it.
"""
