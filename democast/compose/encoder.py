from __future__ import annotations
import io
import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from PIL import Image

from ..errors import EncoderFailed, EncoderNotFound, EncodingError
from ..scenario.models import OutputConfig
from ..utils import round_half_up
from .config import ccfg
from .renderer import RenderedFrame

logger = logging.getLogger(__name__)

EXTENSIONS = {"gif": ".gif", "mp4": ".mp4", "webm": ".webm"}


@dataclass
class EncoderResult:
    returncode: int
    stderr_tail: str = ""


def crf_for_quality(quality: float, max_crf: int = ccfg.H264_MAX_CRF) -> int:
    """Map quality 1..100 onto the codec's CRF scale (100 -> 0, lossless)."""
    return round_half_up(max_crf - quality / 100.0 * max_crf)


def run_encoder(args: Sequence[str]) -> EncoderResult:
    """Run an external encoder; ``args[0]`` is looked up on PATH."""
    binary = args[0]
    executable = shutil.which(binary)
    if not executable:
        raise EncoderNotFound(binary)
    logger.debug("Running %s", " ".join(args))
    completed = subprocess.run(
        [executable, *args[1:]], capture_output=True, text=True, check=False
    )
    tail = (completed.stderr or "")[-ccfg.STDERR_TAIL_CHARS :]
    if completed.returncode != 0:
        raise EncoderFailed(binary, completed.returncode, tail)
    return EncoderResult(completed.returncode, tail)


def _require_frames(frames: Sequence[RenderedFrame], what: str) -> None:
    if not frames:
        raise EncodingError(f"Cannot encode {what}: no frames provided")


def _sized(frame: RenderedFrame, config: OutputConfig) -> Image.Image:
    size = (config.width, config.height)
    pixels = frame.pixels
    if pixels.size != size:
        pixels = pixels.resize(size, Image.Resampling.LANCZOS)
    return pixels


# ---------------------------------------------------------------------------
# GIF
# ---------------------------------------------------------------------------


def encode_gif(frames: Sequence[RenderedFrame], config: OutputConfig) -> bytes:
    """Animated GIF, adaptive 256-colour palette per frame, looping forever."""
    _require_frames(frames, "GIF")
    paletted = [
        _sized(f, config).convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE, colors=256)
        for f in frames
    ]
    first, rest = paletted[0], paletted[1:]
    buffer = io.BytesIO()
    first.save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=rest,
        optimize=True,
        duration=round_half_up(1000 / config.fps),
        loop=0,
    )
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# PNG sequence
# ---------------------------------------------------------------------------


def frame_filename(index: int, total: int) -> str:
    return f"frame-{index:0{len(str(total))}d}.png"


def write_png_sequence(
    frames: Sequence[RenderedFrame], directory: Path, config: OutputConfig
) -> List[Path]:
    """One ``frame-<n>.png`` per frame; numbers zero-padded to the frame count's width."""
    _require_frames(frames, "PNG sequence")
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for frame in frames:
        path = directory / frame_filename(frame.index, len(frames))
        _sized(frame, config).save(path, format="PNG")
        paths.append(path)
    return paths


# ---------------------------------------------------------------------------
# ffmpeg (MP4 / WebM)
# ---------------------------------------------------------------------------


def ffmpeg_args(pattern: str, output_path: str, config: OutputConfig, container: str = "mp4") -> List[str]:
    fps = f"{config.fps:g}"
    args = [ccfg.FFMPEG, "-y", "-framerate", fps, "-i", pattern]
    if container == "webm":
        args += [
            "-c:v", "libvpx-vp9",
            "-pix_fmt", "yuv420p",
            "-b:v", "0",
            "-crf", str(crf_for_quality(config.quality, ccfg.VP9_MAX_CRF)),
        ]
    else:
        args += [
            "-c:v", "libx264",
            "-pix_fmt", "yuv420p",
            "-crf", str(crf_for_quality(config.quality, ccfg.H264_MAX_CRF)),
            "-preset", "slow",
            "-tune", "animation",
            "-movflags", "+faststart",
        ]
    args.append(output_path)
    return args


def encode_video(frames: Sequence[RenderedFrame], config: OutputConfig, container: str = "mp4") -> bytes:
    """Write a PNG sequence to a temp dir and encode it with ffmpeg."""
    _require_frames(frames, container.upper())
    with tempfile.TemporaryDirectory(prefix="democast-") as tmp:
        tmp_dir = Path(tmp)
        write_png_sequence(frames, tmp_dir, config)
        pattern = str(tmp_dir / f"frame-%0{len(str(len(frames)))}d.png")
        output_path = tmp_dir / f"output{EXTENSIONS[container]}"
        run_encoder(ffmpeg_args(pattern, str(output_path), config, container))
        return output_path.read_bytes()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def output_path(config: OutputConfig) -> Path:
    """Where ``save_output`` writes: a file, or a directory for PNG sequences."""
    base = Path(config.output_dir) / config.filename
    if config.format == "png-sequence":
        return base
    return base.with_name(config.filename + EXTENSIONS[config.format])


def save_output(frames: Sequence[RenderedFrame], config: OutputConfig) -> Path:
    """Encode ``frames`` in ``config.format`` and write them under ``output_dir``."""
    target = output_path(config)
    if config.format == "png-sequence":
        write_png_sequence(frames, target, config)
    else:
        if config.format == "gif":
            data = encode_gif(frames, config)
        else:
            data = encode_video(frames, config, config.format)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    logger.info("Wrote %d frames to %s", len(frames), target)
    return target
