"""FFmpeg encode command construction."""

from pathlib import Path

from ayahrender.models.render import AudioTrack, Composition

VIDEO_CODECS = {"h264": "libx264"}


class FFmpegCommandBuilder:
    """Builds the FFmpeg command that encodes piped PNG frames to MP4."""

    def __init__(self, ffmpeg_bin: str = "ffmpeg", crf: int = 18, preset: str = "medium"):
        self.ffmpeg_bin = ffmpeg_bin
        self.crf = crf
        self.preset = preset

    def build_command(
        self,
        composition: Composition,
        output_path: Path,
        codec: str = "h264",
        overwrite: bool = True,
        verbose: bool = False,
    ) -> list[str]:
        """Frames arrive on stdin as image2pipe PNG; audio tracks are extra inputs."""
        cmd = [self.ffmpeg_bin, "-y" if overwrite else "-n"]
        cmd.extend(["-loglevel", "info" if verbose else "error"])
        cmd.extend(
            [
                "-f",
                "image2pipe",
                "-framerate",
                f"{composition.fps:g}",
                "-c:v",
                "png",
                "-i",
                "pipe:0",
            ]
        )

        tracks = composition.audio
        for track in tracks:
            cmd.extend(["-i", track.src])

        cmd.extend(["-map", "0:v"])
        audio_filter = self.build_audio_filter(tracks)
        if audio_filter:
            cmd.extend(["-filter_complex", audio_filter, "-map", "[outa]", "-c:a", "aac"])

        cmd.extend(
            [
                "-c:v",
                VIDEO_CODECS[codec],
                "-crf",
                str(self.crf),
                "-preset",
                self.preset,
                "-pix_fmt",
                "yuv420p",
                "-movflags",
                "+faststart",
                "-t",
                f"{composition.duration:.4f}",
                "-f",
                "mp4",
                str(output_path),
            ]
        )
        return cmd

    def build_audio_filter(self, tracks: list[AudioTrack]) -> str:
        """Delay each track to its offset and mix them into [outa]."""
        if not tracks:
            return ""
        parts = []
        labels = []
        for i, track in enumerate(tracks, start=1):
            chain = []
            if track.offset_seconds > 0:
                delay_ms = int(round(track.offset_seconds * 1000))
                chain.append(f"adelay={delay_ms}:all=1")
            if track.volume != 1.0:
                chain.append(f"volume={track.volume:.2f}")
            if not chain:
                chain.append("anull")
            parts.append(f"[{i}:a]{','.join(chain)}[a{i}]")
            labels.append(f"[a{i}]")
        parts.append(
            "".join(labels) + f"amix=inputs={len(labels)}:duration=longest:normalize=0[outa]"
        )
        return ";".join(parts)
