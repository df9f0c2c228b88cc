"""Local ``.env`` file source, used outside production-like modes."""

import logging
from pathlib import Path
from typing import Union

from ..environment import EnvironmentStore

logger = logging.getLogger(__name__)


def parse_env_file(path: Union[str, Path]) -> list[tuple[str, str]]:
    """Parse a KEY=VALUE file into ordered pairs.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. A
    leading ``export`` is dropped and matching surrounding quotes are
    removed from the value. Returns an empty list if the file is missing.
    """
    path = Path(path).expanduser()
    if not path.exists():
        return []

    pairs = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        k, _, v = line.partition("=")
        k, v = k.strip(), v.strip()
        if not k:
            continue
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]
        pairs.append((k, v))
    return pairs


def load_env_file(path: Union[str, Path], env: EnvironmentStore) -> None:
    """Load a ``.env`` file into ``env`` without overwriting existing keys.

    Process variables and earlier loads win over the file, so calling this
    twice with the same file changes nothing the second time.
    """
    pairs = parse_env_file(path)
    if not pairs:
        logger.debug(f"No local environment file at {path}")
        return

    written = 0
    for k, v in pairs:
        # Don't overwrite explicit env vars
        if not env.has(k):
            env.set(k, v)
            written += 1

    logger.info(f"Loaded {written} of {len(pairs)} values from {path}")
