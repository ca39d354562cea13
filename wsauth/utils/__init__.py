"""Reusable utilities — host parsing and URL helpers.

Keep this package thin and well-documented. Every function here should be
pure and free of I/O.
"""
