#!/usr/bin/env python3
"""
Main Execution Script for the Rekognition batch tool
Enroll or search the faces of a folder of images and print the results as CSV.
"""

import sys

from rekotool.cli import main


if __name__ == "__main__":
    sys.exit(main())
