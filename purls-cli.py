#!/usr/bin/env python3
"""
pURLs - URL parameter editor and redirect parameter tracer

This is a convenience wrapper that calls the package CLI.
The actual implementation is in src/purls/cli.py

Usage:
    python purls-cli.py check "http://example.com/page?utm_source=news"

For more information, see README.md
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from purls.cli import main

if __name__ == '__main__':
    sys.exit(main())
