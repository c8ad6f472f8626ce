"""Norwegian oil fund value per capita: scraper, series store and dashboard."""

__version__ = "1.2.0"
