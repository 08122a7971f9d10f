"""Read-only chain archive interface consumed by the snapshot test generator."""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Tuple

from ..models.chain import BlockHeader, Message, SignedMessage, Tipset, TipsetKey


class ChainArchive(ABC):
    """Read access to a chain archive.

    Implementations raise ``ArchiveError`` on any read failure.
    """

    @abstractmethod
    def heaviest_tipset(self) -> Tipset:
        """Return the tipset with the most accumulated weight."""
        pass

    @abstractmethod
    def load_tipset(self, key: TipsetKey) -> Optional[Tipset]:
        """Return the tipset for ``key``, or ``None`` if the archive does not hold it."""
        pass

    @abstractmethod
    def block_messages(self, block: BlockHeader) -> Tuple[List[Message], List[SignedMessage]]:
        """Return the BLS and Secp256k1 messages included in ``block``."""
        pass

    @abstractmethod
    def market_deal_ids(self, tipset: Tipset) -> List[int]:
        """Return the ids of the market actor's deal proposals in the state of ``tipset``."""
        pass

    def chain(self, tipset: Tipset, limit: int) -> Iterator[Tipset]:
        """Walk back from ``tipset`` (inclusive) through at most ``limit`` tipsets.

        The walk ends early at genesis or at the first parent the archive
        does not hold.
        """
        current: Optional[Tipset] = tipset
        remaining = limit
        while current is not None and remaining > 0:
            yield current
            remaining -= 1
            if current.epoch == 0:
                break
            current = self.load_tipset(current.parents)
