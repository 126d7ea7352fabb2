"""Adapters – durable event store and distributed cache backends.

Each sub-package imports its third-party driver at module level; install the
matching extra (``cart-events[sqlalchemy]``, ``cart-events[redis]``) first.
"""
