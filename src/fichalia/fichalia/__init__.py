"""Fichalia time-tracking package.

Organized by feature modules (time_entries, profiles) with a thin Flask
controller layer over service/repository layers. The session pairing logic
lives in ``time_entries.pairing`` and is free of I/O.
"""
