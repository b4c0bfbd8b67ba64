#!/usr/bin/env python3
"""
Pose-triggered explosion demo. See ``pose_burst.app`` for usage.
"""

from pose_burst.app import main


if __name__ == "__main__":
    main()
