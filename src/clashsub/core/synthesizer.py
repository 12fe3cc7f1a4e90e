"""Merge decoded proxies into a Clash/Mihomo configuration document.

The top-level ``proxies`` list is replaced outright. ``proxy-groups`` are
rewritten member by member so that hand-authored routing survives: members
naming another group or a built-in target (``DIRECT``, ``REJECT``, ...) are
kept in place, groups that only reference such members are left alone, and
the new proxy names are appended without ever duplicating an entry. Every
other top-level key is carried over untouched.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Sequence, Set, Tuple, Union

import yaml

from ..constants import SPECIAL_TARGETS
from ..exceptions import SubscriptionError
from .proxy_parser import parse_raw_subscription
from .records import ProxyRecord
from .yaml_schema import ConfigDumper, ConfigLoader

Document = Dict[str, Any]


def load_document(source: Union[bytes, str, None]) -> Document:
    """
    Parse a YAML configuration document.

    Returns:
        The top-level mapping, or an empty mapping when the source is empty,
        unparsable, or not a mapping.
    """
    if not source:
        return {}
    try:
        document = yaml.load(source, Loader=ConfigLoader)
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        logging.warning("Base configuration is not valid YAML, starting empty: %s", exc)
        return {}
    if not isinstance(document, dict):
        return {}
    return document


def dump_document(document: Document) -> str:
    """Serialize a document back to YAML, keeping key order and scalar spelling."""
    return yaml.dump(
        document,
        Dumper=ConfigDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def _group_names(groups: Iterable[Any]) -> Set[str]:
    names: Set[str] = set()
    for group in groups:
        if isinstance(group, dict) and isinstance(group.get("name"), str):
            names.add(group["name"])
    return names


def _rebuild_members(
    members: List[Any],
    structural: Set[str],
    proxy_names: Sequence[str],
    prune_stale: bool,
) -> List[str]:
    seen: Set[str] = set()
    rebuilt: List[str] = []
    for member in members:
        if not isinstance(member, str):
            continue
        if prune_stale and member not in structural:
            continue
        if member not in seen:
            seen.add(member)
            rebuilt.append(member)
    for name in proxy_names:
        if name not in seen:
            seen.add(name)
            rebuilt.append(name)
    return rebuilt


def merge(
    base_document: Any,
    records: Sequence[ProxyRecord],
    *,
    prune_stale: bool = False,
) -> Document:
    """
    Install ``records`` into a copy of ``base_document``.

    Args:
        base_document: The parsed base configuration. Anything other than a
            mapping is treated as an empty mapping.
        records: Decoded proxies, in the order they should appear.
        prune_stale: Drop existing leaf-proxy members of rewritten groups
            instead of keeping them ahead of the new names.

    Returns:
        A new document; ``base_document`` is not modified.
    """
    document: Document = copy.deepcopy(base_document) if isinstance(base_document, dict) else {}
    document["proxies"] = [record.to_clash() for record in records]

    groups = document.get("proxy-groups")
    if not isinstance(groups, list):
        return document

    structural = _group_names(groups) | set(SPECIAL_TARGETS)
    proxy_names = [record.name for record in records]

    for group in groups:
        if not isinstance(group, dict):
            continue
        members = group.get("proxies")
        if not isinstance(members, list):
            continue
        has_leaf = any(
            isinstance(member, str) and member not in structural for member in members
        )
        if not has_leaf:
            continue
        group["proxies"] = _rebuild_members(members, structural, proxy_names, prune_stale)

    return document


def apply_proxies_to_config(
    base: Union[bytes, str, None],
    records: Sequence[ProxyRecord],
    *,
    prune_stale: bool = False,
) -> str:
    """Parse ``base``, merge ``records`` into it and serialize the result."""
    return dump_document(merge(load_document(base), records, prune_stale=prune_stale))


def convert_raw_subscription(
    raw: Union[bytes, str],
    base: Union[bytes, str, None],
    *,
    prune_stale: bool = False,
) -> Tuple[str, int]:
    """
    Turn a raw link-list subscription into a full configuration.

    Returns:
        The synthesized YAML text and the number of proxies installed.
    Raises:
        SubscriptionError: If no entry of the subscription could be decoded.
    """
    records = parse_raw_subscription(raw)
    if not records:
        raise SubscriptionError("no supported entries found")
    logging.info("Decoded %d proxies from raw subscription", len(records))
    return apply_proxies_to_config(base, records, prune_stale=prune_stale), len(records)
