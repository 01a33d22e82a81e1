import logging
import shlex
import subprocess
from typing import List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

Command = Union[str, List[str]]

COMMAND_NOT_FOUND = 127


def _as_args(command: Command) -> List[str]:
    return shlex.split(command) if isinstance(command, str) else list(command)


def run_command(command: Command, timeout: Optional[float] = None) -> Tuple[int, str, str]:
    """Run a command and return returncode, stdout, stderr."""
    args = _as_args(command)
    try:
        process = subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.debug(f"Command not found: {args[0]}")
        return COMMAND_NOT_FOUND, "", f"{args[0]}: command not found"

    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        stdout, stderr = process.communicate()
        logger.warning(f"Command timed out after {timeout}s: {' '.join(args)}")
    return (
        process.returncode,
        stdout.decode('utf-8', errors='replace').strip(),
        stderr.decode('utf-8', errors='replace').strip(),
    )


def command_exists(command: str) -> bool:
    """Check if a command exists in the system."""
    return run_command(['which', command])[0] == 0


def spawn_detached(command: Command) -> Optional[subprocess.Popen]:
    """Start a process that outlives the current one. Returns None when the executable is missing."""
    args = _as_args(command)
    try:
        return subprocess.Popen(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
    except FileNotFoundError:
        logger.warning(f"Cannot start {args[0]}: command not found")
        return None
