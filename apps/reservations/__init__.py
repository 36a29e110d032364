"""Reservations app package.

The reservation booking engine: conflict detection over facility time
windows, the approval lifecycle and the transactional command handlers
that drive it.
"""
