from beanie import Document


class Counter(Document):
    """Per-collection integer id sequence; _id is the collection name."""

    id: str
    seq: int = 0

    class Settings:
        name = "counters"
