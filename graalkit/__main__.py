"""
Entry point for running GraalKit CLI as a module.

Usage: python -m graalkit [command] [options]
"""

from graalkit.cli.parser import main

if __name__ == "__main__":
    main()
