"""Notifications app package.

Listens to reservation lifecycle events and turns them into in-app
notifications, plus a best-effort status-change email sent through
Celery. Delivery failures are logged and never reach the engine.
"""
