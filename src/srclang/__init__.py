"""
Source Programming Language
Command-line toolchain: run, compile, interactive shell and projects
"""

__version__ = "0.1.0"
