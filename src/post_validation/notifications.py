"""Side-channel notifications for the editor (toasts in the web UI)."""

from dataclasses import dataclass

from common import logger as output

LEVELS = ("success", "error", "info", "warning")


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class Notifier:
    """Shows notifications on the console and keeps them for the UI to poll."""

    def __init__(self, echo: bool = True, max_history: int = 100):
        """Initialize the notifier.

        Args:
            echo: Print notifications to the rich console
            max_history: Number of past notifications kept
        """
        self.echo = echo
        self.max_history = max_history
        self.history: list[Notification] = []

    def notify(self, level: str, message: str) -> None:
        if level not in LEVELS:
            raise ValueError(f"Unknown notification level: {level}")

        self.history.append(Notification(level=level, message=message))
        del self.history[: -self.max_history]

        if not self.echo:
            return
        if level == "success":
            output.success(message)
        elif level == "error":
            output.error(message)
        elif level == "warning":
            output.warning(message)
        else:
            output.progress(message)

    def success(self, message: str) -> None:
        self.notify("success", message)

    def error(self, message: str) -> None:
        self.notify("error", message)

    def info(self, message: str) -> None:
        self.notify("info", message)

    def warning(self, message: str) -> None:
        self.notify("warning", message)

    def messages(self, level: str | None = None) -> list[str]:
        """Get past messages, optionally filtered by level."""
        return [n.message for n in self.history if level is None or n.level == level]
