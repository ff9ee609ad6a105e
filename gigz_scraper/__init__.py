"""Show calendar scraper for The Broadway (thebroadway.nyc)."""

__version__ = "0.1.0"
