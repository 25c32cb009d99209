#!/usr/bin/env python3
"""
Main entry point for the Niche Navigator CLI
"""

from niche_navigator.cli import run

if __name__ == "__main__":
    run()
