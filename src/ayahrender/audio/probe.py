"""Audio duration probing with ffprobe over a byte stream."""

import asyncio
import json
import logging
import math
from collections.abc import AsyncIterable

from ayahrender.models.errors import AudioProbeError

logger = logging.getLogger(__name__)


def parse_probe_duration(stdout: str | bytes) -> float | None:
    """Extract format.duration from ffprobe JSON output.

    Missing, unparsable, zero and negative durations all map to None.
    """
    try:
        probe = json.loads(stdout or "{}")
    except json.JSONDecodeError:
        return None
    raw = (probe.get("format") or {}).get("duration")
    try:
        duration = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(duration) or duration <= 0:
        return None
    return duration


class FFprobeDurationParser:
    """Reads container-level duration from audio bytes piped into ffprobe."""

    def __init__(self, ffprobe_bin: str = "ffprobe", timeout: float = 30.0):
        self.ffprobe_bin = ffprobe_bin
        self.timeout = timeout

    def build_command(self) -> list[str]:
        return [
            self.ffprobe_bin,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "json",
            "-i",
            "pipe:0",
        ]

    async def parse(self, chunks: AsyncIterable[bytes]) -> float | None:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise AudioProbeError(
                "ffprobe not found. Please install FFmpeg.",
                details={"command": self.ffprobe_bin},
            )

        try:
            await self._feed(process, chunks)
            stdout, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
        except TimeoutError:
            raise AudioProbeError("Audio probe timed out")
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()

        if process.returncode != 0:
            raise AudioProbeError(
                f"ffprobe exited with code {process.returncode}",
                details={"stderr": stderr.decode(errors="replace")[-500:]},
            )
        return parse_probe_duration(stdout)

    async def _feed(self, process: asyncio.subprocess.Process, chunks: AsyncIterable[bytes]) -> None:
        # ffprobe may close stdin as soon as it has read enough of the header
        try:
            async for chunk in chunks:
                process.stdin.write(chunk)
                await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("ffprobe closed its input early")
        finally:
            try:
                process.stdin.close()
            except (BrokenPipeError, ConnectionResetError):
                pass
