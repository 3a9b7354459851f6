"""Readiness report for the collaborators behind each duration stage.

Tag parsing needs nothing outside the standard library; durations degrade
stage by stage when a library or the ffmpeg binary is absent.
"""

from __future__ import annotations

import importlib
import shutil
import subprocess
from dataclasses import dataclass
from typing import Literal

DoctorStatus = Literal["ok", "missing", "error"]

_STATUS_TOKENS: dict[str, str] = {"ok": "[OK]", "missing": "[MISS]", "error": "[ERR]"}


@dataclass(frozen=True)
class DoctorCheck:
    """Outcome of probing one dependency."""

    name: str
    status: DoctorStatus
    required: bool
    detail: str
    hint: str | None = None
    stage: str | None = None


@dataclass(frozen=True)
class DoctorReport:
    checks: list[DoctorCheck]

    @property
    def exit_code(self) -> int:
        """2 when a required dependency is unusable, otherwise 0."""
        failed = [c for c in self.checks if c.required and c.status != "ok"]
        return 2 if failed else 0


def run_doctor() -> DoctorReport:
    checks = [
        probe_module("mutagen", required=True),
        probe_module("tinytag", required=False),
        probe_ffmpeg(required=False),
    ]
    return DoctorReport(checks=checks)


def render_report(report: DoctorReport) -> str:
    lines = ["tagsniff doctor", ""]
    for check in report.checks:
        token = _STATUS_TOKENS.get(check.status, "[ERR]")
        need = "required" if check.required else "optional"
        stage = check.stage or "-"
        lines.append(f"{token:<6} {check.name:<8} {need:<8} {stage:<18} {check.detail}")
        if check.hint:
            lines.append(f"{'':<6} hint: {check.hint}")
    lines.append("")
    lines.append(f"Result: {'OK' if report.exit_code == 0 else 'FAIL'}")
    return "\n".join(lines)


def probe_module(name: str, *, required: bool) -> DoctorCheck:
    """Import ``name`` and report its version string when it exposes one."""
    stage = "container-declared"
    try:
        module = importlib.import_module(name)
    except Exception as exc:
        return DoctorCheck(
            name=name,
            status="missing",
            required=required,
            detail=f"import failed: {exc.__class__.__name__}",
            hint=f"pip install {name}",
            stage=stage,
        )
    version = getattr(module, "version_string", None) or getattr(
        module, "__version__", None
    )
    return DoctorCheck(
        name=name,
        status="ok",
        required=required,
        detail=f"version {version}" if version else "imported",
        stage=stage,
    )


def probe_ffmpeg(*, required: bool) -> DoctorCheck:
    """Locate ffmpeg and confirm it starts; it backs the stream-probe stage."""
    stage = "stream-probe"
    binary = shutil.which("ffmpeg")
    if binary is None:
        return DoctorCheck(
            name="ffmpeg",
            status="missing",
            required=required,
            detail="not on PATH",
            hint="Install ffmpeg to time streams without header durations.",
            stage=stage,
        )
    try:
        proc = subprocess.run(
            [binary, "-hide_banner", "-version"],
            capture_output=True,
            text=True,
            timeout=2,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        detail = f"could not start {binary}: {exc.__class__.__name__}"
        return _broken_ffmpeg(detail, required=required)
    if proc.returncode != 0:
        return _broken_ffmpeg(
            f"ffmpeg -version failed (exit={proc.returncode})", required=required
        )
    lines = proc.stdout.strip().splitlines() if proc.stdout else []
    return DoctorCheck(
        name="ffmpeg",
        status="ok",
        required=required,
        detail=lines[0] if lines else binary,
        stage=stage,
    )


def _broken_ffmpeg(detail: str, *, required: bool) -> DoctorCheck:
    return DoctorCheck(
        name="ffmpeg",
        status="error",
        required=required,
        detail=detail,
        hint="Reinstall ffmpeg or fix PATH.",
        stage="stream-probe",
    )
