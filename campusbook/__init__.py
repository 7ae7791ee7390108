"""CampusBook shared libraries.

This package contains the appointment-booking building blocks:
- common: Configuration, logging and the exception hierarchy
- storage: Scoped string-keyed storage media (memory, file, Redis)
- docstore: Document store emulator over a storage medium
- auth: Credential and session management
- models: Pydantic document shapes
- records: Domain operations written against the document store
"""
