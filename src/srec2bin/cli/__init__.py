"""
srec2bin Command-Line Interface
===============================

This package provides the `srec2bin` command-line tool, a Click-based
application that builds a binary ROM image from S-Record files.
"""

__all__ = ["srec2bin"]
