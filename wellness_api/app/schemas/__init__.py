"""
Pydantic schema definitions for API payloads.

Each resource (moods, reminders, memories) defines models for request
bodies and for the documents it reads back.  Stored documents use the
camelCase field names of the wire format (``createdAt``,
``photoPath``); the models expose snake_case attributes with aliases.
"""
