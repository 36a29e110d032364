"""Facilities app package.

The facility registry: bookable rooms, halls and equipment, their
capacity and maintenance windows. The reservation engine reads it but
never owns it.
"""
