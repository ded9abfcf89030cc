"""Publishing chart images and cleaning up temporary files."""

import shutil
from pathlib import Path
from typing import Iterable, Mapping, Protocol, Union

from . import log


class Uploader(Protocol):
    """Stores a local file under a key and returns its public URL."""

    def upload(self, local_path: Path, destination_key: str) -> str: ...


class LocalDirectoryUploader:
    """Copies files into a directory served at a fixed base URL."""

    def __init__(self, public_dir: Union[str, Path], base_url: str):
        self.public_dir = Path(public_dir)
        self.base_url = base_url.rstrip("/")

    def upload(self, local_path: Path, destination_key: str) -> str:
        key = destination_key.strip("/")
        if not key or ".." in Path(key).parts:
            raise ValueError(f"Invalid destination key: {destination_key!r}")

        target = self.public_dir / key
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(local_path, target)
        log.debug(f"Uploaded {local_path} -> {target}")
        return f"{self.base_url}/{key}"


def upload_images(
    uploader: Uploader,
    paths: Mapping[str, Path],
    base_key: str,
) -> dict[str, str]:
    """Upload named images under base_key.

    Args:
        uploader: Destination for the files
        paths: Name -> local PNG path
        base_key: Key prefix, e.g. reports/<user>/<timestamp>

    Returns:
        Name -> public URL
    """
    base = base_key.strip("/")
    return {
        name: uploader.upload(Path(path), f"{base}/{name}.png")
        for name, path in paths.items()
    }


def cleanup_files(paths: Iterable[Union[str, Path]]) -> None:
    """Delete temporary files; missing files are ignored, failures only warned."""
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            log.warn(f"Could not remove temporary file {path}: {e}")
