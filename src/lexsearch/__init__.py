"""lexsearch - TF-IDF full-text search over local document folders"""

__version__ = "0.1.0"
