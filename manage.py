#!/usr/bin/env python3
import sys
import os

# Ensure src is in python path for development execution
sys.path.append(os.path.join(os.path.dirname(__file__), 'src'))

try:
    from moneymachine.manage import main
except ImportError as e:
    print(f"Error importing AI Money Machine: {e}")
    print("Please ensure you have installed dependencies: pip install -r requirements.txt")
    print("And that 'src' is accessible.")
    sys.exit(1)

if __name__ == "__main__":
    sys.exit(main())
