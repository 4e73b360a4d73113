from tasktracker.ports.id_provider import IdProvider
import uuid

class UuidIdProvider(IdProvider):
    """Random UUID4 identifiers in canonical (dashed) form."""

    def new_id(self) -> str:
        return str(uuid.uuid4())
