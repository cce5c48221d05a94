"""
c4term.interfaces - Terminal interfaces for Connect Four

This package contains the keyboard decoder, the raw-mode terminal session,
the ANSI renderer and the command-line entry point.
"""

# Don't import anything here to avoid circular imports
__all__ = []
