"""
Service layer.

Each service encapsulates business logic for one concern and receives
its collaborators (resolver, storage client) at construction, so API
handlers never talk to the storage directly.
"""
