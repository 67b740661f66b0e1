"""
contractgraph.loader - Read contract files from disk.

Contracts are YAML files selected by a glob pattern. Every matched file
becomes a ContractFile, including files whose YAML does not parse: those
carry ``parse_error`` so validation can report them alongside the rest.
"""

from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import Optional

import yaml

from contractgraph.errors import ContractSourceError
from contractgraph.models import ContractFile
from contractgraph.utilities.hasher import calculate_hash

logger = logging.getLogger(__name__)


def resolve_contract_paths(pattern: str, base_dir: Optional[Path] = None) -> list[Path]:
    """Expand a contracts glob pattern to a sorted list of absolute file paths.

    Relative patterns are resolved against ``base_dir`` (default: cwd).
    ``**`` matches across directories.
    """
    if not Path(pattern).is_absolute():
        pattern = str((base_dir or Path.cwd()) / pattern)
    matches = glob.glob(pattern, recursive=True)
    return sorted(Path(m).resolve() for m in matches if Path(m).is_file())


def read_contract_file(path: Path) -> ContractFile:
    """Read and parse a single contract file.

    Never raises for bad content: read and YAML errors end up in
    ``parse_error`` with ``parsed`` set to None.
    """
    try:
        # Decoded from bytes so line endings survive into the hash
        raw_content = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return ContractFile(
            file_name=path.name,
            file_path=str(path),
            raw_content="",
            parsed=None,
            file_hash=calculate_hash(""),
            parse_error=str(e),
        )

    file_hash = calculate_hash(raw_content)
    try:
        parsed = yaml.safe_load(raw_content)
    except yaml.YAMLError as e:
        logger.warning("Error parsing file %s: %s", path, e)
        return ContractFile(
            file_name=path.name,
            file_path=str(path),
            raw_content=raw_content,
            parsed=None,
            file_hash=file_hash,
            parse_error=str(e),
        )

    logger.debug("Successfully parsed: %s", path.name)
    return ContractFile(
        file_name=path.name,
        file_path=str(path),
        raw_content=raw_content,
        parsed=parsed,
        file_hash=file_hash,
    )


def load_contract_files(pattern: Optional[str], base_dir: Optional[Path] = None) -> list[ContractFile]:
    """Load every contract file matching ``pattern``.

    Args:
        pattern: Glob pattern for contract files (``[contracts] path``)
        base_dir: Directory relative patterns are resolved against

    Returns:
        ContractFiles in path order; an empty list when nothing matches

    Raises:
        ContractSourceError: If no pattern is configured
    """
    if not pattern:
        raise ContractSourceError(
            "Contracts path is not configured (set [contracts] path or CONTRACTGRAPH_CONTRACTS_PATH)"
        )

    logger.info("Loading contracts from: %s", pattern)
    paths = resolve_contract_paths(pattern, base_dir)
    if not paths:
        logger.warning("No contract files found matching pattern: %s", pattern)
        return []

    logger.info("Found %d contract file(s)", len(paths))
    return [read_contract_file(path) for path in paths]
