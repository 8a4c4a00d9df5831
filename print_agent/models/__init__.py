"""
Print Agent Models
"""

from .job import JobKind, JobState, PrintJob

__all__ = ['JobKind', 'JobState', 'PrintJob']
