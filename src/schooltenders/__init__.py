"""
SchoolTenders - tender discovery for school websites.

Crawls the websites of schools, extracts procurement/tender announcements
from their pages, and upserts them into a local catalog database.
"""

__version__ = "0.1.0"
__app_name__ = "schooltenders"
