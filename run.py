"""
Entry Point Script (Bootstrap)
==============================
Runs the headless demo straight from a source checkout.

Why is this file needed?
------------------------
It is located outside the 'src' package and modifies 'sys.path' so that
'from thermalhouse...' resolves without installing the package.

Usage:
    $ python run.py
"""
import sys
import os

# Add the 'src' directory to the Python path
current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from thermalhouse.__main__ import main

if __name__ == "__main__":
    main()
