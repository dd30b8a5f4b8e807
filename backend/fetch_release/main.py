#!/usr/bin/env python3
"""
fetch-release - install prebuilt stake-o-matic binaries.
Script entry point for running from a source checkout.
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fetch_release.entrypoint import main  # noqa: E402

if __name__ == "__main__":
    main()
