"""Make ``cfdaily_bot`` importable without installing the package."""

import os
import sys

# The repository root holds the package; put it first on ``sys.path`` so a
# plain ``pytest`` run from a checkout imports the working tree.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)
