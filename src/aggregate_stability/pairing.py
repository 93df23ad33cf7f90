"""Locate the initial/final image pair inside one sample folder.

Roles come from the file name alone: ``<prefix>_0_c<n>_p<n>.<ext>`` is the
photo taken before submersion, ``<prefix>_601_c<n>_p<n>.<ext>`` the one taken
after. A swapped pair would silently invert the score, so the convention is
matched strictly.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Union

from .errors import MissingPairError

logger = logging.getLogger(__name__)

FILENAME_PATTERN = re.compile(
    r'^(?P<prefix>.*)_(?P<token>0|601)_c(?P<camera>\d+)_p(?P<position>\d+)\.(?P<ext>[^.]+)$'
)


class Role(Enum):
    INITIAL = 'initial'
    FINAL = 'final'
    UNCLASSIFIED = 'unclassified'


_TOKEN_ROLES = {'0': Role.INITIAL, '601': Role.FINAL}


@dataclass(frozen=True)
class SamplePair:
    """Initial and final image paths found for one sample folder."""
    initial: Path
    final: Path
    folder: Path


def classify_filename(name: Union[str, Path]) -> Role:
    """Return the role a file plays based on its name (directories are ignored)."""
    match = FILENAME_PATTERN.match(Path(name).name)
    if match is None:
        return Role.UNCLASSIFIED
    return _TOKEN_ROLES[match.group('token')]


def list_sample_files(folder: Path) -> List[Path]:
    """Regular files directly inside ``folder``, sorted by name."""
    return sorted(p for p in folder.iterdir() if p.is_file())


def locate_sample_pair(folder: Union[str, Path]) -> SamplePair:
    """
    Find the one initial and the one final image in a sample folder.

    Args:
        folder: Sample folder (not searched recursively)

    Returns:
        SamplePair with both image paths

    Raises:
        MissingPairError: If a role has zero or several matching files
        NotADirectoryError: If ``folder`` is not a directory
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise NotADirectoryError(folder)

    files = list_sample_files(folder)
    if len(files) != 2:
        logger.warning(f"Expected 2 files in sample folder {folder}, found {len(files)}. Continuing...")

    by_role: Dict[Role, List[Path]] = {Role.INITIAL: [], Role.FINAL: []}
    for path in files:
        role = classify_filename(path.name)
        if role is Role.UNCLASSIFIED:
            logger.debug(f"Ignoring unclassified file {path}")
            continue
        by_role[role].append(path)

    for role in (Role.INITIAL, Role.FINAL):
        if len(by_role[role]) != 1:
            raise MissingPairError(folder, role.value, len(by_role[role]))

    return SamplePair(
        initial=by_role[Role.INITIAL][0],
        final=by_role[Role.FINAL][0],
        folder=folder
    )
