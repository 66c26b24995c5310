"""
Attendance Service - Face Encoding Matching and Attendance Marking

A modular Python service that matches face encodings submitted by capture
devices against enrolled students and records attendance per subject.
"""

__version__ = "1.0.0"
__author__ = "Attendance Service Team"
