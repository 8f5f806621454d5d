#!/usr/bin/env python3
"""
Build RubroQuote executable with PyInstaller.

Usage:
  python build.py
  python build.py --onefile
  python build.py --name RubroQuote
"""

import argparse
import subprocess
import sys
from pathlib import Path

from core.app_icon import get_icon_path


def run(cmd):
    print(" ".join(cmd))
    subprocess.check_call(cmd)


def main():
    root = Path(__file__).resolve().parent
    entry = root / "MainApp.py"
    if not entry.exists():
        print(f"Entry point not found: {entry}")
        return 1

    parser = argparse.ArgumentParser(description="Build RubroQuote with PyInstaller")
    parser.add_argument("--onefile", action="store_true", help="Build a single-file executable")
    parser.add_argument("--name", default="RubroQuote", help="Executable name")
    args = parser.parse_args()

    cmd = [
        sys.executable,
        "-m",
        "PyInstaller",
        "--clean",
        "--noconfirm",
        "--name",
        args.name,
        str(entry),
    ]

    if args.onefile:
        cmd.insert(4, "--onefile")
    else:
        cmd.insert(4, "--onedir")

    # Add noconsole to hide terminal window
    cmd.insert(4, "--noconsole")

    icon_path = get_icon_path()
    if icon_path.exists():
        cmd[-1:-1] = ["--add-data", f"assets{';' if sys.platform == 'win32' else ':'}assets",
                      "--icon", str(icon_path)]

    # Le .env n'est jamais embarqué : les identifiants restent sur le poste
    run(cmd)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
