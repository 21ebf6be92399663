"""
Module: builder

Purpose:
    Album print pipeline: slot geometry, image preparation, bubble
    rasters, page composition and PDF output.

Key Functions:
    - build_album(): Main entry point

Key Classes:
    - BuilderConfig: Build configuration
    - BuildResult: Build output
    - BuildError: Fatal build failure

Used By:
    - photobook_toolkit.__main__: CLI
"""

from .config import BuilderConfig
from .controller import BuildError, BuildResult, build_album
from .log_capture import CapturedLog, LogCapture

__all__ = [
    "BuildError",
    "BuildResult",
    "BuilderConfig",
    "CapturedLog",
    "LogCapture",
    "build_album",
]
