"""
Terminal client for the scrollterm scrollback and motion tokenizer

A small IRC-style terminal interface showing a chat buffer and a debug log,
with a command line driven by recorded key motions.

Usage:
    python -m client path/to/config.json
"""

__version__ = "0.1.0"
