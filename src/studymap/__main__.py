"""
Run with: python -m studymap
"""
import sys

from studymap.main import main

if __name__ == "__main__":
    sys.exit(main())
