"""Maven installation discovery.

The toolchain root is found by running ``mvn -v`` through the platform
shell and reading the ``Maven home:`` line of its output.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

MAVEN_HOME_MARKER = "Maven home: "


def probe_command(maven_command: str = "mvn") -> list[str]:
    """Return the shell command that prints Maven version information."""
    if os.name == "nt":
        return ["cmd.exe", "/c", f"{maven_command} -v"]
    return ["sh", "-c", f"{maven_command} -v"]


def parse_maven_home(output: str) -> Path | None:
    """Extract the Maven home from ``mvn -v`` output.

    Args:
        output: Text printed by the probe.

    Returns:
        Path after the first marker line, or None if there is none.
    """
    for line in output.splitlines():
        if MAVEN_HOME_MARKER in line:
            home = line.split(MAVEN_HOME_MARKER, 1)[1].strip()
            if home:
                return Path(home)
    return None


def find_maven_home(maven_command: str = "mvn") -> Path | None:
    """Locate the Maven installation used for the run.

    Args:
        maven_command: Command name of the Maven launcher.

    Returns:
        Maven home path, or None if it cannot be determined.
    """
    logger.info("Finding maven home")
    try:
        result = subprocess.run(
            probe_command(maven_command),
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        logger.error("Failed to find maven home: %s", e)
        return None

    home = parse_maven_home(result.stdout)
    if home is None:
        logger.debug("No '%s' line in probe output", MAVEN_HOME_MARKER.strip())
    return home


__all__ = ["MAVEN_HOME_MARKER", "find_maven_home", "parse_maven_home", "probe_command"]
