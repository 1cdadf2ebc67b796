"""LinkHub - bookmarks stored as a JSON file in a GitHub repository."""

__version__ = "0.1.0"
