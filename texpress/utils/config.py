"""
Compile settings for TEXPRESS.

Settings come from environment variables (optionally via a .env file) and can be
overridden by a YAML file. The resulting CompileSettings value is passed into the
pipeline explicitly; no stage reads the environment on its own.

Environment variables:
    TEXPRESS_CLEAN_OUTPUT     Remove auxiliary files after compiling (default: true)
    TEXPRESS_USE_TEXI2DVI     Compile through texi2dvi when available (default: false)
    TEXPRESS_SHELL_ESCAPE     Allow \\write18 shell commands (default: false)
    TEXPRESS_DEFAULT_PROGRAM  LaTeX program when no magic comment names one (default: pdflatex)
    TEXPRESS_DEFAULT_WEAVE    Rnw weave driver, Sweave or knitr (default: Sweave)
    TEXPRESS_TEX_BIN_DIR      Directory searched before PATH for TeX programs
    TEXPRESS_RSCRIPT          Rscript executable used for weaving (default: Rscript)
    TEXPRESS_LOGS_PATH        Directory for session logs (default: outs/logs)
    TEXPRESS_EVENTS_FILE      JSON Lines pipeline event log (default: <logs>/pipeline_events.log)

Example YAML override:
    clean_output: false
    default_program: xelatex
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class CompileSettings:
    """
    Configuration consumed by one compilation pipeline.

    Attributes:
        clean_output: Remove .aux/.out (and logs on success) after compiling
        use_texi2dvi: Prefer the texi2dvi wrapper over invoking the program directly
        shell_escape: Pass -shell-escape to the LaTeX program
        default_program: Program used when no magic comment selects one
        default_weave: Weave driver used when no magic comment selects one
        tex_bin_dir: Optional directory searched before PATH
        rscript: Rscript executable used by the weave stage
        logs_path: Directory for per-session loguru logs
        events_file: JSON Lines file receiving pipeline events
    """

    clean_output: bool = True
    use_texi2dvi: bool = False
    shell_escape: bool = False
    default_program: str = "pdflatex"
    default_weave: str = "Sweave"
    tex_bin_dir: Optional[Path] = None
    rscript: str = "Rscript"
    logs_path: Path = Path("outs/logs")
    events_file: Optional[Path] = None

    @property
    def pipeline_events_file(self) -> Path:
        """Event log location, defaulting to a file inside logs_path."""
        if self.events_file is not None:
            return self.events_file
        return self.logs_path / "pipeline_events.log"


def settings_from_env() -> CompileSettings:
    """Build settings from TEXPRESS_* environment variables."""
    load_dotenv()

    tex_bin_dir = os.getenv("TEXPRESS_TEX_BIN_DIR")
    events_file = os.getenv("TEXPRESS_EVENTS_FILE")

    return CompileSettings(
        clean_output=_env_flag("TEXPRESS_CLEAN_OUTPUT", True),
        use_texi2dvi=_env_flag("TEXPRESS_USE_TEXI2DVI", False),
        shell_escape=_env_flag("TEXPRESS_SHELL_ESCAPE", False),
        default_program=os.getenv("TEXPRESS_DEFAULT_PROGRAM", "pdflatex"),
        default_weave=os.getenv("TEXPRESS_DEFAULT_WEAVE", "Sweave"),
        tex_bin_dir=Path(tex_bin_dir) if tex_bin_dir else None,
        rscript=os.getenv("TEXPRESS_RSCRIPT", "Rscript"),
        logs_path=Path(os.getenv("TEXPRESS_LOGS_PATH", "outs/logs")),
        events_file=Path(events_file) if events_file else None,
    )


def load_yaml_overrides(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML settings file into a plain dict.

    Raises:
        ValueError: If the file contains keys that are not settings
    """
    overrides = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True) or {}

    known = {f.name for f in fields(CompileSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown settings in {config_path}: {unknown}. Known settings: {sorted(known)}")

    for key in ("tex_bin_dir", "logs_path", "events_file"):
        if overrides.get(key) is not None:
            overrides[key] = Path(overrides[key])

    return overrides


def load_settings(config_path: Optional[Path] = None, **overrides) -> CompileSettings:
    """
    Resolve compile settings.

    Precedence (lowest to highest): defaults, environment, YAML file, keyword overrides.

    Args:
        config_path: Optional YAML file with setting overrides
        **overrides: Explicit values (e.g. from CLI flags); None values are ignored

    Returns:
        CompileSettings for one pipeline run
    """
    settings = settings_from_env()

    if config_path is not None:
        settings = replace(settings, **load_yaml_overrides(Path(config_path)))

    explicit = {key: value for key, value in overrides.items() if value is not None}
    if explicit:
        settings = replace(settings, **explicit)

    return settings
