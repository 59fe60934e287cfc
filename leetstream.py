#!/usr/bin/env python3
"""
Convenience shim to run leetstream from a source checkout.
Usage: python leetstream.py [--plan|--json|--help|--config PATH] IDENTIFIER
"""

from leetstream.cli import main


if __name__ == "__main__":
    main()
