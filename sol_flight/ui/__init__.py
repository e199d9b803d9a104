from .console_ui import ConsoleUI

__all__ = ["ConsoleUI"]
