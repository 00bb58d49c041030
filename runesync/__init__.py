"""runesync - rune page and summoner spell sync for the League of Legends client."""

__version__ = "0.1.0"
