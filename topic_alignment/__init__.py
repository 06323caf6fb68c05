"""Topic-model content alignment between curriculum standards and test items."""

__version__ = "0.1.0"
