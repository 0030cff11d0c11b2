"""Listings app package.

Rentable listings owned by hosts and their per-date calendar
(availability flag and price override).
"""
