"""
App icon utilities (bundled assets lookup).
"""

from __future__ import annotations
import sys
from pathlib import Path


def get_app_root() -> Path:
    """Returns the root directory of the application, handling PyInstaller bundles."""
    if hasattr(sys, '_MEIPASS'):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parent.parent


def get_icon_path() -> Path:
    """Returns path to the main application .ico file."""
    return get_app_root() / "assets" / "app.ico"


def apply_frame_icon(frame) -> bool:
    """Set the window icon when the .ico is shipped. Returns False when it is missing."""
    import wx

    path = get_icon_path()
    if not path.exists():
        return False
    frame.SetIcon(wx.Icon(str(path), wx.BITMAP_TYPE_ICO))
    return True
