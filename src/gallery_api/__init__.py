"""
Gallery CMS backend: public gallery, admin panel, image uploads and articles.
"""

__version__ = "1.0.0"
