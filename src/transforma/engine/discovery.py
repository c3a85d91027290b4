"""Input file discovery and output path naming."""

from pathlib import Path

from transforma.core.schemas import OutputNaming
from transforma.logger import RunLogger


def list_input_files(directory: Path, logger: RunLogger) -> list[Path]:
    """List regular files directly inside ``directory``, sorted by name.

    Subdirectories are not descended into. A missing directory is logged
    and treated as empty.
    """
    if not directory.is_dir():
        logger.error(f"Directory does not exist: {directory}")
        return []

    try:
        files = [entry for entry in directory.iterdir() if entry.is_file()]
    except OSError as e:
        logger.error(f"Failed to list files in {directory}: {e}")
        return []

    return sorted(files, key=lambda entry: entry.name)


def output_path_for(
    input_path: Path, output_dir: Path, naming: OutputNaming | str = OutputNaming.PRESERVE
) -> Path:
    """Derive the output path of ``input_path`` under the naming policy.

    ``preserve`` keeps the input file name; ``json`` keeps the stem and
    forces a ``.json`` extension.
    """
    if OutputNaming(naming) == OutputNaming.JSON:
        return output_dir / f"{input_path.stem}.json"
    return output_dir / input_path.name
