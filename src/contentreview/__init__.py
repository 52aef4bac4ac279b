"""Content Review - recurring review workflow for CMS page trees.

This package assigns review owners and intervals to pages (or to the
site-wide defaults), works out when each page is next due for review,
reports overdue pages, and records reviews made by their owners.
"""

__version__ = "0.1.0"
