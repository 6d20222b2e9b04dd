#!/usr/bin/env python3
"""
Webcam gesture instrument demo.

Index fingertip height selects the note, hand depth the octave and horizontal
position the volume. Press 'r' to record, 'p' to play back, 'q' to quit.
"""

from __future__ import annotations

import os
import sys

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from gesture_instrument.app import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
