#!/usr/bin/env python3
"""
Launch script for the Q-Learning Lab with proper environment setup.
Qt environment variables are set before PySide6 is imported.
"""

import os
import sys

os.environ['QT_AUTO_SCREEN_SCALE_FACTOR'] = '0'
os.environ['QT_LOGGING_RULES'] = '*=false;qt.qpa.backingstore=false;qt.qpa.drawing=false'

from qlab.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
