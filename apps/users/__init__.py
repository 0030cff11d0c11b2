"""Users app package.

Accounts of guests, hosts and administrators. Roles decide what an
``ActingUser`` may do; ``apps.users.domain.policies`` holds the single
authorization predicate used by every use case.
"""
