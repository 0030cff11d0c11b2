"""Notifications app package.

Turns domain events into email notifications delivered asynchronously
by Celery. Delivery failures are logged and never reach the operation
that raised the event.
"""
