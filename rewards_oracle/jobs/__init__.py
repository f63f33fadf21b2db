"""Dramatiq actors for queue-triggered oracle cycles.

Import :mod:`rewards_oracle.jobs.actor` once a broker is configured; the
actors register with the broker at import time.
"""
