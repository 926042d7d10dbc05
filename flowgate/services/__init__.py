"""
Submission and status-polling services.
"""
