"""Components described by hand in showcase.yaml."""

from showcase.catalog.categorize import categorize
from showcase.config.schema import OverrideEntry
from showcase.types import ComponentOrigin, ComponentRecord


class OverrideSource:
    """User overrides. Always win name collisions."""

    origin = ComponentOrigin.USER_OVERRIDE
    label = "overrides"

    def __init__(self, entries: list[OverrideEntry], import_path: str = "") -> None:
        self.entries = entries
        self.import_path = import_path

    async def discover(self) -> list[ComponentRecord]:
        return [
            ComponentRecord(
                name=entry.name,
                category=entry.category or categorize(entry.name),
                props=entry.props,
                slots=entry.slots,
                description=entry.description,
                import_path=entry.import_path or self.import_path,
                origin=self.origin,
            )
            for entry in self.entries
        ]
