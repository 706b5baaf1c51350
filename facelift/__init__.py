"""Web Facelift: scrape a website and generate a modern site blueprint."""

__version__ = "0.1.0"
