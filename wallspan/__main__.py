"""
__main__.py

This file adds support for running wallspan as a python module (python -m wallspan) instead of
invoking the "wallspan" command line entrypoint.
"""

from wallspan.cli import main


if __name__ == "__main__":
    main()
