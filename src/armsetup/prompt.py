"""Single-keystroke yes/no prompts."""

import sys
from typing import Callable, Optional

ReadChar = Callable[[], str]


def _read_char_from_stdin() -> str:
    """Read one character; raw mode on a TTY so no Enter is needed."""
    stream = sys.stdin
    try:
        is_tty = stream.isatty()
    except (AttributeError, ValueError):
        is_tty = False
    if not is_tty:
        return stream.read(1)

    import termios
    import tty

    fd = stream.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = stream.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
    sys.stdout.write(ch)
    return ch


def prompt_boolean(question: str, read_char: Optional[ReadChar] = None) -> bool:
    """Ask *question* and return True only for an explicit y/Y."""
    if read_char is None:
        read_char = _read_char_from_stdin
    sys.stdout.write(f"{question} (y/N): ")
    sys.stdout.flush()
    answer = read_char()
    if answer == "\x03":
        sys.stdout.write("\n")
        raise KeyboardInterrupt
    sys.stdout.write("\n")
    sys.stdout.flush()
    return answer in ("y", "Y")


def never(question: str) -> bool:
    """Prompt stand-in for --non-interactive runs."""
    return False
