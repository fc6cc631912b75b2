from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
import tomllib

DEFAULT_CONFIG_PATH = Path("~/.config/rymcheck/config.toml").expanduser()
DEFAULT_JELLYFIN_URL = "http://localhost:8096"

# Record attributes compared by the matcher, in evaluation order
MATCH_FIELDS: Tuple[str, str] = ("title", "artist")


@dataclass(frozen=True)
class MatchPolicy:
    title_threshold: float = 0.75     # strict: similarity must be greater
    artist_threshold: float = 0.75
    articles: Tuple[str, ...] = ("the",)

    def threshold_for(self, field: str) -> float:
        return getattr(self, f"{field}_threshold")


DEFAULT_POLICY = MatchPolicy()


def load_config(path: Path | None = None) -> dict:
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        # Everything can still be supplied on the command line
        return {}

    with cfg_path.open("rb") as f:
        cfg = tomllib.load(f)

    # Expand ~ in any string paths under [paths]
    paths = cfg.get("paths", {})
    for k, v in list(paths.items()):
        if isinstance(v, str):
            paths[k] = os.path.expanduser(v)

    return cfg


def policy_from_config(
    cfg: dict,
    title_threshold: Optional[float] = None,
    artist_threshold: Optional[float] = None,
) -> MatchPolicy:
    """
    Builds the MatchPolicy from the [matching] table.
    Explicit arguments (CLI flags) win over the config file.
    """
    m = cfg.get("matching", {})
    articles = m.get("articles", DEFAULT_POLICY.articles)
    if not isinstance(articles, (list, tuple)):
        raise ValueError(f"[matching] articles must be a list, got {type(articles).__name__}")

    policy = MatchPolicy(
        title_threshold=float(
            title_threshold if title_threshold is not None
            else m.get("title_threshold", DEFAULT_POLICY.title_threshold)
        ),
        artist_threshold=float(
            artist_threshold if artist_threshold is not None
            else m.get("artist_threshold", DEFAULT_POLICY.artist_threshold)
        ),
        articles=tuple(str(a).lower() for a in articles),
    )
    for field in MATCH_FIELDS:
        t = policy.threshold_for(field)
        if not 0.0 <= t <= 1.0:
            raise ValueError(f"{field} threshold must be within [0, 1], got {t}")
    return policy
