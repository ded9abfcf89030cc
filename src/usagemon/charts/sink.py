"""Write finished canvases to uniquely named PNG files."""

import os
import time
import uuid
from pathlib import Path

from .canvas import Canvas
from .. import log


def unique_filename(prefix: str) -> str:
    """'{prefix}_{epoch_ms}_{random}.png'; unique per call, never content-addressed."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.png"


def write_png(canvas: Canvas, out_dir: Path, prefix: str) -> Path:
    """Encode a canvas and write it under out_dir.

    The file is written to a temporary name first and renamed into place,
    so a failed write never leaves a partial PNG at the returned path.
    Encoding and I/O errors propagate to the caller.

    Returns:
        Absolute path of the new PNG file
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    data = canvas.to_png_bytes()
    path = (out_dir / unique_filename(prefix)).resolve()
    partial = path.with_name(path.name + ".part")
    try:
        partial.write_bytes(data)
        os.replace(partial, path)
    except OSError:
        partial.unlink(missing_ok=True)
        raise

    log.debug(f"Generated chart: {path}")
    return path
