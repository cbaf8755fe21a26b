"""
Allow running the package directly: python -m juliaviewer
"""
import sys

from .cli import main

sys.exit(main())
