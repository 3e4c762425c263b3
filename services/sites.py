"""Static site configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from app.schemas import SiteSchema
from models.records import Site

logger = logging.getLogger(__name__)

DEFAULT_SITES: Tuple[Site, ...] = (
    Site(id="PS-EDMONDS", name="Edmonds Nearshore", lat=47.812, lon=-122.377, depth_m=4),
    Site(id="PS-ALKI", name="Alki Cove", lat=47.576, lon=-122.413, depth_m=5),
    Site(id="PS-DOCKTON", name="Dockton Cove", lat=47.373, lon=-122.463, depth_m=3),
    Site(id="PS-SKAGIT", name="Skagit Bay Farm", lat=48.327, lon=-122.482, depth_m=2),
)


def load_sites(path: Optional[Union[str, Path]] = None) -> Tuple[Site, ...]:
    """Return the default sites, or the sites listed in a JSON file."""
    if path is None:
        return DEFAULT_SITES

    source = Path(path)
    data = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Site file {source} must contain a JSON array.")

    sites = tuple(SiteSchema.model_validate(item).to_site() for item in data)
    if not sites:
        raise ValueError(f"Site file {source} does not list any sites.")

    seen: set[str] = set()
    for site in sites:
        if site.id in seen:
            raise ValueError(f"Duplicate site id {site.id!r} in {source}.")
        seen.add(site.id)

    logger.info("Loaded site configuration", extra={"path": str(source), "site_count": len(sites)})
    return sites


def filter_sites(sites: Iterable[Site], query: Optional[str]) -> List[Site]:
    """Case-insensitive substring match on site name or id."""
    candidates = list(sites)
    needle = (query or "").strip().lower()
    if not needle:
        return candidates
    return [
        site
        for site in candidates
        if needle in site.name.lower() or needle in site.id.lower()
    ]
