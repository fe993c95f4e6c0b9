"""
Field Projector - Maps raw appState payloads onto AddressSummary.

The payload shape is reverse-engineered from observed explorer pages
and may change without notice. All knowledge of upstream field paths
lives in this module; missing data yields None, never an exception.
"""

from typing import Any, Optional, Sequence, Union

from explorer_adapters.models import AddressSummary, EntityTag


Key = Union[str, int]

PAGE_STATE_PATH: tuple[str, ...] = ("appContext", "initialProps", "store", "pageState")
INFO_PATH: tuple[str, ...] = PAGE_STATE_PATH + ("infoStore", "state")
TAG_STORE_PATH: tuple[str, ...] = PAGE_STATE_PATH + ("tagStore",)
USDT_HOLDING_PATH: tuple[str, ...] = INFO_PATH + ("usdtHolding",)

# "addressDetaiInfo" is the upstream spelling
DETAIL_KEY = "addressDetaiInfo"

LABEL_KEYS: tuple[str, ...] = ("text", "name", "label")


def dig(value: Any, *keys: Key, default: Any = None) -> Any:
    """
    Walk nested dicts/lists by key, returning default on any gap.

    String keys index dicts, int keys index lists. A missing key,
    an out-of-range index, a None node or a node of the wrong type
    all short-circuit to default.
    """
    current = value
    for key in keys:
        if isinstance(key, int) and not isinstance(key, bool):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return default
            current = current[key]
        elif isinstance(current, dict):
            if key not in current:
                return default
            current = current[key]
        else:
            return default
        if current is None:
            return default
    return current


def _section(value: Any, path: Sequence[Key]) -> dict[str, Any]:
    section = dig(value, *path)
    return section if isinstance(section, dict) else {}


def _label(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item or None
    if isinstance(item, dict):
        for key in LABEL_KEYS:
            candidate = item.get(key)
            if isinstance(candidate, str) and candidate:
                return candidate
    return None


def normalize_tag_list(items: Any) -> list[str]:
    """
    Flatten a tag list to its non-empty labels, order preserved.

    Accepts strings and objects carrying text/name/label (first
    non-empty wins). Anything else is dropped; a non-list gives [].
    """
    if not isinstance(items, list):
        return []
    labels = []
    for item in items:
        label = _label(item)
        if label:
            labels.append(label)
    return labels


def normalize_entity_tags(items: Any) -> list[EntityTag]:
    """Entity tag objects as EntityTag values; malformed entries dropped."""
    if not isinstance(items, list):
        return []
    tags = []
    for item in items:
        if isinstance(item, str) and item:
            tags.append(EntityTag(text=item))
        elif isinstance(item, dict):
            text = item.get("text")
            tag_type = item.get("type")
            tags.append(EntityTag(
                text=text if isinstance(text, str) else None,
                type=tag_type if isinstance(tag_type, str) else None,
            ))
    return tags


def normalize_contract_flag(value: Any) -> Optional[bool]:
    """Pass through strict booleans only; anything else is unknown."""
    return value if isinstance(value, bool) else None


def project_summary(main_state: Any, token_state: Any) -> AddressSummary:
    """Merge the profile and token-transfer page states into one summary."""
    info = _section(main_state, INFO_PATH)
    tags = _section(main_state, TAG_STORE_PATH)
    tag_maps = tags.get("tagMaps") if isinstance(tags.get("tagMaps"), dict) else {}
    detail = info.get(DETAIL_KEY) if isinstance(info.get(DETAIL_KEY), dict) else {}

    return AddressSummary(
        address=info.get("address"),
        entity_tag=tag_maps.get("entityTag"),
        entity_tags=normalize_entity_tags(tags.get("entityTags")),
        risk_tags=normalize_tag_list(tags.get("riskTags")),
        property_tags=normalize_tag_list(tags.get("propertyTags")),
        is_contract=normalize_contract_flag(tag_maps.get("isContract")),
        total_usd_value=info.get("totalUsdValue"),
        balance_trx=info.get("balance"),
        usdt_holding=dig(token_state, *USDT_HOLDING_PATH),

        first_entry_from_address=detail.get("firstEntryFromAddress"),
        first_entry_timestamp=detail.get("firstEntryTimestamp"),
        first_entry_amount=detail.get("firstEntryAmount"),
        first_entry_tx_hash=detail.get("firstEntryTxHash"),

        total_tx_amount=detail.get("totalTxAmount"),
        first_tx_timestamp=detail.get("firstTxTimestamp"),
        first_tx_hash=detail.get("firstTxHash"),
        last_tx_timestamp=detail.get("lastTxTimestamp"),
        last_tx_hash=detail.get("lastTxHash"),
    )
