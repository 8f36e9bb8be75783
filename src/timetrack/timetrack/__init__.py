"""Attendance and time-tracking engine.

Feature modules (attendance, reports, shifts, ...) keep a thin Flask
controller layer over service and repository layers.
"""
