#!/usr/bin/env python3
"""UPI and bank statement extractor.

Entry point script that wraps the package CLI for running from a checkout.

Usage:
    python extract_statements.py phonepe_statement.pdf -o result.json

For full documentation and options:
    python extract_statements.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from finpal_extractor.cli import main

if __name__ == "__main__":
    sys.exit(main())
