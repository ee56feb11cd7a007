"""Read-only access to the catalog of pre-authored refinement problems."""

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from refineplay.config import Config
from refineplay.errors import UnknownProblem
from refineplay.models import Problem

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "problems.yaml"


class Catalog:
    """Ordered mapping of problem key to Problem. Keys keep authored order."""

    def __init__(self, problems: Mapping[str, Problem] | None = None) -> None:
        self._problems: dict[str, Problem] = dict(problems or {})

    def get(self, key: str) -> Problem:
        try:
            return self._problems[key]
        except KeyError:
            raise UnknownProblem(key) from None

    def keys(self) -> list[str]:
        return list(self._problems)

    def items(self) -> list[tuple[str, Problem]]:
        return list(self._problems.items())

    def __contains__(self, key: object) -> bool:
        return key in self._problems

    def __iter__(self) -> Iterator[str]:
        return iter(self._problems)

    def __len__(self) -> int:
        return len(self._problems)

    def __repr__(self) -> str:
        return f"Catalog({len(self)} problems: {', '.join(self._problems)})"


def parse_catalog(raw: Any) -> Catalog:
    """Build a Catalog from parsed YAML/JSON data.

    Accepts either ``{"problems": {key: problem, ...}}`` or a bare
    ``{key: problem, ...}`` mapping. Entries that fail validation are
    skipped; the rest still load.
    """
    if isinstance(raw, Mapping) and "problems" in raw:
        raw = raw["problems"]
    if not isinstance(raw, Mapping):
        logger.error("Catalog data is not a mapping (got %s)", type(raw).__name__)
        return Catalog()

    problems: dict[str, Problem] = {}
    for key, entry in raw.items():
        if not isinstance(entry, Mapping):
            logger.warning("Skipping problem %r: entry is not a mapping", key)
            continue
        try:
            problems[str(key)] = Problem.model_validate({**entry, "key": str(key)})
        except ValidationError as e:
            logger.warning(
                "Skipping problem %r: %d validation error(s)", key, e.error_count(),
            )
    return Catalog(problems)


def load_catalog(path: Path) -> Catalog:
    """Load a catalog from a YAML or JSON file.

    Never raises: an unreadable or unparseable file yields an empty catalog,
    so every later lookup fails with UnknownProblem.
    """
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.error("Failed to load catalog from %s: %s", path, e)
        return Catalog()

    catalog = parse_catalog(raw)
    logger.debug("Loaded %s from %s", catalog, path)
    return catalog


def default_catalog() -> Catalog:
    """The embedded catalog shipped with the package."""
    return load_catalog(DEFAULT_CATALOG_PATH)


def catalog_for(config: Config) -> Catalog:
    """The configured catalog file, or the embedded one when none is set."""
    path = config.resolved_catalog_path
    if path is None:
        return default_catalog()
    return load_catalog(path)
