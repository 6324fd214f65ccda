"""Discovery source protocol.

A source enumerates components from one kind of input (an installed package,
a directory of source files, a custom-elements manifest, or configuration) and
normalizes them into ComponentRecord. Sources are read-only, so the builder
probes them concurrently.

Usage:
    class MySource:
        origin = ComponentOrigin.LOCAL_FILE_SCAN
        label = "my-source"

        async def discover(self) -> list[ComponentRecord]:
            ...
"""

from typing import Protocol, runtime_checkable

from showcase.types import ComponentOrigin, ComponentRecord


@runtime_checkable
class CatalogSource(Protocol):
    """Protocol every discovery source implements.

    ``discover`` may raise CatalogSourceError (or anything else); the builder
    logs the failure and treats the source as having contributed nothing.
    """

    origin: ComponentOrigin
    label: str

    async def discover(self) -> list[ComponentRecord]:
        """Return the components this source can see."""
        ...
