"""Bookings app package.

This app encapsulates the booking domain: admission of new bookings,
pricing and the booking lifecycle. Admission is serialized per listing
and backed by an exclusion constraint on PostgreSQL, so two active
bookings of one listing never overlap.
"""
