"""Process helpers shared by the external tool wrappers."""

import logging
import subprocess
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 5


def launch_command(
    cmd: List[str],
    env: Optional[Mapping[str, str]] = None
) -> subprocess.CompletedProcess:
    """Run an external command to completion.
    
    The call blocks without timeout. Output is captured so it does not
    pollute the progress log; it is only shown at debug level or when
    the tool fails.
    
    Parameters
    ----------
    cmd : List[str]
        Command as list of strings
    env : Optional[Mapping[str, str]]
        Environment for the child process
        
    Returns
    -------
    subprocess.CompletedProcess
        Finished process. A missing executable is reported with
        returncode 127 instead of raising.
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True
        )
    except FileNotFoundError as e:
        return subprocess.CompletedProcess(cmd, 127, stdout="", stderr=str(e))
    
    if result.stdout:
        logger.debug(result.stdout.rstrip())
    return result


def stderr_tail(text: Optional[str], lines: int = STDERR_TAIL_LINES) -> str:
    """Return the last few non-empty lines of a tool's stderr."""
    if not text:
        return ""
    kept = [line for line in text.splitlines() if line.strip()]
    return "\n".join(kept[-lines:])


def format_number(value) -> str:
    """Shortest exact text for a numeric option (``0.3``, ``-0.1234567``)."""
    return repr(float(value))
