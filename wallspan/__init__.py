"""
wallspan - span Unsplash photos across every display as your desktop wallpaper.
"""

__version__ = "0.1.0"
