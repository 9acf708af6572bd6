"""
Entry point for the CGDSL CLI.

Usage:
    python -m cgdsl grammar build
"""

from cgdsl.cli import main

if __name__ == "__main__":
    main()
