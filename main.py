#!/usr/bin/env python3
"""TimeFocus entry point.

Run with:
    python main.py
    python -m timefocus
"""

from timefocus.__main__ import main


if __name__ == "__main__":
    main()
