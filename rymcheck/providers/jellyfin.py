from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

import requests

from rymcheck.errors import AuthError, DecodeError, FetchCancelled, TransportError
from rymcheck.types import AlbumRecord

logger = logging.getLogger(__name__)

PAGE_SIZE = 200
ITEM_FIELDS = "PrimaryImageTag,AlbumArtist,AlbumArtists,ProductionYear,Overview"


@dataclass(frozen=True)
class CatalogPage:
    items: List[AlbumRecord]
    total_count: int
    returned_offset: int


def _items_path(user_id: Optional[str]) -> str:
    return f"/Users/{user_id}/Items" if user_id else "/Items"


def _auth_headers(token: str) -> dict:
    return {"X-MediaBrowser-Token": token}


def _jellyfin_get(session: requests.Session, base_url: str, path: str, params: dict, headers: dict):
    url = f"{base_url.rstrip('/')}{path}"
    try:
        # Token goes per request; a caller's session is left untouched
        r = session.get(url, params=params, headers=headers, timeout=60)
    except requests.exceptions.RequestException as e:
        raise TransportError(f"GET {url} failed: {e}") from e

    if r.status_code != 200:
        raise AuthError(f"GET {url} failed: {r.status_code} {r.text}", r.status_code)

    try:
        return r.json()
    except ValueError as e:
        raise DecodeError(f"GET {url} returned a non-JSON body") from e


def _album_from_item(item) -> AlbumRecord:
    if not isinstance(item, dict):
        raise DecodeError(f"Unexpected item type: {type(item)}")
    name = item.get("Name")
    if not isinstance(name, str):
        raise DecodeError(f"Item {item.get('Id')!r} has no Name")

    artist = item.get("AlbumArtist") or ""
    if not artist:
        # Fall back to the AlbumArtists list of {"Id", "Name"} pairs
        names = [
            a.get("Name") for a in item.get("AlbumArtists") or []
            if isinstance(a, dict) and a.get("Name")
        ]
        artist = ", ".join(names)

    year = item.get("ProductionYear")
    overview = item.get("Overview")
    if overview is not None and not isinstance(overview, str):
        raise DecodeError(f"Item {item.get('Id')!r} has a non-string Overview")
    image_tag = item.get("PrimaryImageTag")
    if not image_tag:
        tags = item.get("ImageTags")
        image_tag = tags.get("Primary") if isinstance(tags, dict) else None

    return AlbumRecord(
        external_id=str(item.get("Id") or ""),
        title=name,
        artist=str(artist),
        # bool is an int subclass
        year=year if type(year) is int else 0,
        overview=overview or "",
        image_tag=image_tag or "",
    )


def _parse_page(payload, offset: int) -> CatalogPage:
    if not isinstance(payload, dict):
        raise DecodeError(f"Unexpected /Items response type: {type(payload)}")
    items = payload.get("Items")
    total = payload.get("TotalRecordCount")
    if not isinstance(items, list):
        raise DecodeError(f"Unexpected Items type: {type(items)}")
    if not isinstance(total, int):
        raise DecodeError(f"Unexpected TotalRecordCount: {total!r}")

    returned_offset = payload.get("StartIndex")
    return CatalogPage(
        items=[_album_from_item(it) for it in items],
        total_count=total,
        returned_offset=returned_offset if isinstance(returned_offset, int) else offset,
    )


def fetch_page(
    session: requests.Session,
    base_url: str,
    offset: int,
    token: str,
    user_id: Optional[str] = None,
    page_size: int = PAGE_SIZE,
) -> CatalogPage:
    params = {
        "IncludeItemTypes": "MusicAlbum",
        "Recursive": "true",
        "SortBy": "SortName",
        "SortOrder": "Ascending",
        "StartIndex": str(offset),
        "Limit": str(page_size),
        "Fields": ITEM_FIELDS,
    }
    payload = _jellyfin_get(session, base_url, _items_path(user_id), params, _auth_headers(token))
    return _parse_page(payload, offset)


def fetch_all_albums(
    base_url: str,
    token: str,
    user_id: Optional[str] = None,
    session: Optional[requests.Session] = None,
    cancel: Optional[threading.Event] = None,
    page_size: int = PAGE_SIZE,
) -> List[AlbumRecord]:
    """
    Returns every MusicAlbum in the Jellyfin library, in server sort order.

    Pages are requested one after another. The offset advances by the number
    of items actually returned, so short pages are handled. Fetching ends once
    the received count reaches TotalRecordCount, or on the first empty page
    (guards against a server that overstates its total).

    Any failure (transport, non-200 status, bad body, cancellation) raises a
    CatalogError and nothing is returned; there is no retry.

    The token is sent as a per-request header. A session passed in by the
    caller is not modified; a session created here is closed on return.
    """
    if session is None:
        with requests.Session() as owned:
            return _fetch_all(owned, base_url, token, user_id, cancel, page_size)
    return _fetch_all(session, base_url, token, user_id, cancel, page_size)


def _fetch_all(
    session: requests.Session,
    base_url: str,
    token: str,
    user_id: Optional[str],
    cancel: Optional[threading.Event],
    page_size: int,
) -> List[AlbumRecord]:
    albums: List[AlbumRecord] = []
    offset = 0
    total: Optional[int] = None
    last_page_empty = False

    while not last_page_empty and (total is None or offset < total):
        if cancel is not None and cancel.is_set():
            raise FetchCancelled(f"Fetch cancelled after {len(albums)} albums")

        page = fetch_page(session, base_url, offset, token, user_id=user_id, page_size=page_size)
        logger.debug(
            "Jellyfin page at %d: %d items (total %d)",
            page.returned_offset, len(page.items), page.total_count,
        )

        albums.extend(page.items)
        offset += len(page.items)
        total = page.total_count
        last_page_empty = not page.items

    if total is not None and len(albums) < total:
        logger.warning("Jellyfin reported %d albums but returned %d", total, len(albums))
    logger.info("Fetched %d albums from Jellyfin", len(albums))
    return albums
