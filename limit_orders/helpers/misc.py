from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple, TypeVar

from ..enums import ORDER_TYPE_LIMIT

T = TypeVar("T")


def gather_objects_by_prop(
    objects: Iterable[T], get_key: Callable[[T], str]
) -> Dict[str, List[Tuple[int, T]]]:
    """
    Group objects by a derived key, keeping their original positions.

    Keys appear in first-seen order; objects sharing a key are appended to
    that key's list in input order as (index, object) pairs.
    """
    grouped: Dict[str, List[Tuple[int, T]]] = {}
    for index, obj in enumerate(objects):
        grouped.setdefault(get_key(obj), []).append((index, obj))
    return grouped


def construct_base_fetch_url_getter(api_url: str, chain_id: int) -> Callable[[str], str]:
    base = api_url.rstrip("/")

    def get_base_fetch_url(order_type: str = ORDER_TYPE_LIMIT) -> str:
        order_url_part = "orders" if order_type == ORDER_TYPE_LIMIT else "p2p"
        return f"{base}/ft/{order_url_part}/{chain_id}"

    return get_base_fetch_url


def find_event_abi(abi: Iterable[Mapping[str, Any]], name: str) -> Mapping[str, Any]:
    for entry in abi:
        if entry.get("type") == "event" and entry.get("name") == name:
            return entry
    raise KeyError(f"event {name} not found in ABI")
