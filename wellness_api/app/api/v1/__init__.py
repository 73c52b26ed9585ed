"""
Version 1 of the API.

Bundles the health check, the three record resources (moods,
reminders, memories) and the signed blob download route.
"""
