# app/services/menu_service.py

from typing import Iterator, List, Optional

from app.schemas.dashboard import MenuItem


def iter_menu_items(items: List[MenuItem]) -> Iterator[MenuItem]:
    """Depth-first, parents before children, siblings in order."""
    for item in items:
        yield item
        if item.children:
            yield from iter_menu_items(item.children)


def menu_item_ids(items: List[MenuItem]) -> List[str]:
    return [item.id for item in iter_menu_items(items)]


def find_menu_item(items: List[MenuItem], menu_id: str) -> Optional[MenuItem]:
    for item in iter_menu_items(items):
        if item.id == menu_id:
            return item
    return None


def ensure_unique_menu_ids(items: List[MenuItem]) -> None:
    seen = set()
    for menu_id in menu_item_ids(items):
        if menu_id in seen:
            raise ValueError(f"Duplicate menu item id '{menu_id}'")
        seen.add(menu_id)


def emptied_branches(items: List[MenuItem]) -> List[str]:
    """
    Ids of branch nodes that carry no children (e.g. every child was filtered out).
    Such entries still render as plain links; the renderer decides whether to show them.
    """
    return [item.id for item in iter_menu_items(items) if item.is_branch and not item.children]
