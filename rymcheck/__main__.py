from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from rymcheck.config import DEFAULT_JELLYFIN_URL, load_config, policy_from_config
from rymcheck.providers.jellyfin import fetch_all_albums
from rymcheck.compare import reconcile, reference_json
from rymcheck.errors import CatalogError, InputFormatError
from rymcheck.rym_csv import read_rym_csv
from rymcheck.types import AlbumRecord


FIELDNAMES = ["external_id", "artist", "title", "year", "overview", "image_tag"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="rymcheck: list Jellyfin albums that are not already in a RateYourMusic CSV export."
    )
    ap.add_argument("--config", default=None, help="Path to config file (default: ~/.config/rymcheck/config.toml)")

    # Jellyfin
    ap.add_argument("--jellyfin-url", default=None, help="Jellyfin base URL (overrides config)")
    ap.add_argument("--token", default=None, help="Jellyfin API token (overrides config)")
    ap.add_argument("--user-id", default=None, help="Query /Users/{id}/Items instead of /Items")

    # Reference catalog
    ap.add_argument("--csv", default=None, help="RateYourMusic CSV export (overrides [paths] csv)")

    # Matching
    ap.add_argument("--title-threshold", type=float, default=None, help="Title similarity must exceed this (default 0.75)")
    ap.add_argument("--artist-threshold", type=float, default=None, help="Artist similarity must exceed this (default 0.75)")

    # Output
    ap.add_argument(
        "--out",
        default=None,
        help="Output CSV path for unique albums (default: rymcheck_<timestamp>.csv)",
    )
    ap.add_argument("--json", default=None, help="Also write the parsed RYM catalog as JSON here")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return ap.parse_args(argv)


def write_unique_csv(path: Path, albums: List[AlbumRecord]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # Excel-friendly UTF-8 with BOM
    with path.open("w", newline="", encoding="utf-8-sig") as f:
        w = csv.DictWriter(f, fieldnames=FIELDNAMES)
        w.writeheader()
        for a in albums:
            w.writerow(a.to_dict())


def sort_local(albums: List[AlbumRecord]) -> List[AlbumRecord]:
    return sorted(albums, key=lambda a: (a.artist.lower(), a.title.lower()))


def main(argv: Optional[List[str]] = None, session=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    cfg = load_config(Path(args.config) if args.config else None)
    policy = policy_from_config(cfg, args.title_threshold, args.artist_threshold)

    # Jellyfin settings
    jf_cfg = cfg.get("jellyfin", {})
    jellyfin_url = args.jellyfin_url or jf_cfg.get("url", DEFAULT_JELLYFIN_URL)
    token = args.token or jf_cfg.get("token")
    user_id = args.user_id or jf_cfg.get("user_id")
    if not token:
        raise SystemExit("Jellyfin token not provided (via config or --token)")

    paths_cfg = cfg.get("paths", {})
    csv_path = args.csv or paths_cfg.get("csv")
    if not csv_path:
        raise SystemExit("RYM CSV not provided (via config or --csv)")

    # Reference catalog first; a bad file means nothing is reconciled
    try:
        reference = read_rym_csv(csv_path)
    except InputFormatError as e:
        print(f"Parse error: {e}")
        print("0 unique albums")
        return 1
    print(f"Read {len(reference)} albums from {csv_path}")

    try:
        local = fetch_all_albums(jellyfin_url, token, user_id=user_id, session=session)
    except CatalogError as e:
        raise SystemExit(f"Jellyfin fetch failed: {e}")
    print(f"Fetched {len(local)} albums from {jellyfin_url}")

    result = reconcile(sort_local(local), reference, policy)

    total = len(result.unique)
    for i, a in enumerate(result.unique, start=1):
        print(f"[{i}/{total}] {a.label()}")
    print(f"{total} unique albums ({result.matched} already in RYM)")

    out_default = paths_cfg.get("out")
    if args.out:
        out_path = Path(args.out)
    elif out_default:
        out_path = Path(out_default)
    else:
        ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        out_path = Path(f"rymcheck_{ts}.csv")
    write_unique_csv(out_path, result.unique)
    print(f"Wrote {total} rows to {out_path}")

    if args.json and reference:
        json_path = Path(args.json)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(reference_json(reference) + "\n", encoding="utf-8")
        print(f"Wrote RYM catalog JSON to {json_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
