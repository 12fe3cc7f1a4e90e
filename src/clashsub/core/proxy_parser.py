from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Type, Union

from .parsers import ShadowsocksParser, TrojanParser, VlessParser, VmessParser
from .parsers.common import BaseParser
from .records import ProxyRecord
from .subscription import extract_subscription_lines

DEFAULT_DECODERS: Sequence[Type[BaseParser]] = (
    ShadowsocksParser,
    VmessParser,
    VlessParser,
    TrojanParser,
)


class ProxyParser:
    """
    Decode share links with an ordered list of decoders.

    Each decoder is tried in turn and the first one that returns a record
    wins. Lines no decoder accepts are dropped.
    """

    def __init__(self, decoders: Optional[Sequence[Type[BaseParser]]] = None):
        self.decoders = tuple(decoders or DEFAULT_DECODERS)

    def parse_link(self, link: str) -> Optional[ProxyRecord]:
        """
        Decode a single share link.

        Returns:
            The record from the first decoder that accepts the link, or None.
        """
        for decoder in self.decoders:
            record = decoder(link).parse()
            if record is not None:
                return record
        return None

    def parse_links(self, links: Iterable[str]) -> List[ProxyRecord]:
        """Decode every link, silently skipping the ones that fail."""
        records: List[ProxyRecord] = []
        for link in links:
            record = self.parse_link(link)
            if record is None:
                logging.debug("Skipping unsupported subscription entry: %.40s", link)
                continue
            records.append(record)
        return records

    def parse_raw_subscription(self, payload: Union[bytes, str]) -> List[ProxyRecord]:
        """Extract link lines from a raw subscription payload and decode them."""
        return self.parse_links(extract_subscription_lines(payload))


_default_parser = ProxyParser()


def parse_link(link: str) -> Optional[ProxyRecord]:
    return _default_parser.parse_link(link)


def parse_raw_subscription(payload: Union[bytes, str]) -> List[ProxyRecord]:
    return _default_parser.parse_raw_subscription(payload)
