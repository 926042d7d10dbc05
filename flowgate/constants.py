"""
Shared constants for remote job bookkeeping.
"""

DEFAULT_RENDER_RESULT = "Reports/AutoReport.html"
FAILED_JOB_NUMBER = "-1"
JOB_NUMBER_SEPARATOR = ","

METADATA_FILE_NAME = "metadata.txt"
DESCRIPTION_FILE_NAME = "description.txt"
