"""Users app package.

Defines the custom user model used as ``AUTH_USER_MODEL``. Users carry
a role (member or administrator); the reservation engine receives the
caller's id and role explicitly on every call.
"""
