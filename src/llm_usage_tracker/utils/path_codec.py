"""Decode Claude project directory names and derive project labels."""

import re


def decode_path(encoded: str) -> str:
    """Decode a Claude project directory name to a filesystem path.

    -home-wiz-AI-LLM → /home/wiz/AI/LLM
    """
    if not encoded:
        return ""
    return encoded.replace("-", "/")


def split_segments(path: str) -> list[str]:
    """Split a POSIX or Windows path into its non-empty segments."""
    return [part for part in re.split(r"[\\/]+", path) if part]


def project_label(encoded: str) -> str:
    """Turn an encoded project directory name into a short project label.

    -home-wiz-trees-project → trees/project
    -project                → project
    my-project              → my-project (not encoded, used as-is)
    """
    if not encoded.startswith("-"):
        return encoded
    segments = split_segments(decode_path(encoded))
    if len(segments) >= 2:
        return "/".join(segments[-2:])
    if segments:
        return segments[-1]
    return encoded


def project_from_cwd(cwd: str) -> str | None:
    """Last two segments of a working directory, e.g. /home/wiz/src/app → src/app."""
    segments = split_segments(cwd or "")
    if not segments:
        return None
    return "/".join(segments[-2:])
