"""Common base for source adapters."""

from typing import List

from ..aggregator import Aggregator


class SourceAdapter:
    """
    One producer of session facts feeding the aggregator.

    Subclasses decide how their slice of state is maintained: push
    adapters replace it wholesale, pull adapters patch it per session.
    """

    kind = "source"

    def __init__(self, aggregator: Aggregator):
        self.aggregator = aggregator

    @property
    def source_ids(self) -> List[str]:
        """Source identifiers this adapter has written to."""
        raise NotImplementedError

    async def start(self) -> None:
        """Begin producing updates."""
        return None

    async def stop(self) -> None:
        """Stop producing updates and release resources."""
        return None

    def describe(self) -> dict:
        return {"kind": self.kind, "sources": self.source_ids}
