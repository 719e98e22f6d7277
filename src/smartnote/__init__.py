"""
Smart Note: local-first note taking.

A small personal note store that provides:
- Stable note identity with insert-or-replace saves
- A most-recently-touched-first note list
- Title search
"""

__version__ = "0.1.0"
