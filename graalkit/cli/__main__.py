"""
Entry point for running GraalKit CLI as a module.

Usage: python -m graalkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
