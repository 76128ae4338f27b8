"""Version comparison utilities."""

import re

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


def _component_value(part: str) -> int:
    match = _LEADING_INT.match(part)
    if not match:
        return 0
    return int(match.group(0))


def parse_version(version: str) -> list[int]:
    """Parse a version string into numeric components.

    Handles both "1.2.3" and "v1.2.3". Components without a leading number
    count as 0, so "1.x.3" parses to [1, 0, 3].
    """
    normalized = version[1:] if version.startswith("v") else version
    return [_component_value(part) for part in normalized.split(".")]


def compare_versions(version1: str, version2: str) -> int:
    """Compare two version strings.

    Returns a negative number if version1 < version2, positive if greater,
    0 if equal. Missing trailing components are treated as 0.
    """
    parts1 = parse_version(version1)
    parts2 = parse_version(version2)

    for i in range(max(len(parts1), len(parts2))):
        num1 = parts1[i] if i < len(parts1) else 0
        num2 = parts2[i] if i < len(parts2) else 0
        if num1 != num2:
            return num1 - num2
    return 0


__all__ = [
    "parse_version",
    "compare_versions",
]
