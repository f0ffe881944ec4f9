"""
Interactive prompt utilities.

The Prompter is the only place that talks to the operator's terminal. Stages
receive it as an argument so tests can feed scripted answers.
"""
from typing import Callable, Optional

from automount.core.exceptions import UserCancelledError


class Prompter:
    """
    Line-oriented operator dialogue.

    Args:
        read_line: Callable returning the next line typed by the operator
        write: Callable printing one line of output to the operator
    """
    def __init__(
        self,
        read_line: Optional[Callable[[], str]] = None,
        write: Callable[[str], None] = print
    ):
        self.read_line = read_line or input
        self.write = write

    def say(self, message: str = "") -> None:
        self.write(message)

    def ask(self, message: str) -> str:
        """
        Show a question and return the stripped answer.

        Raises:
            UserCancelledError: If the input stream is closed
        """
        self.write(message)
        try:
            answer = self.read_line()
        except EOFError:
            raise UserCancelledError("No input available, operation cancelled")
        return answer.strip()

    def confirm_yes_no(self, message: str) -> bool:
        """Ask a (y/n) question; only y or Y counts as agreement."""
        return self.ask(f"{message} (y/n)") in ("y", "Y")
