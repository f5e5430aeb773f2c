"""
Content Understanding Pipeline

Submit documents to a Content Understanding analyzer, wait for the
long-running analysis to finish, and save each result both as JSON and as a
rendered HTML view of the extracted fields.
"""

__version__ = "0.1.0"
