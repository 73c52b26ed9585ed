"""
Application package initializer.

The backend is organised into small pieces: ``core`` holds settings,
logging, authentication, the error taxonomy and the two storage
abstractions (key/value records and binary blobs); ``services`` holds
one record service per resource (moods, reminders, memories);
``api/v1`` exposes a router per resource.  Every record lives in the
shared key/value store under a ``<type>:`` key prefix.
"""
