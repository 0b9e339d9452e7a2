"""
Main entry point for the Workdesk Toolkit application.

Clean Code principles:
- Minimal main file
- Dependency injection at the root
- Clear program flow
"""

import sys
import tkinter as tk
from gui import WorkdeskGUI


def _enable_high_dpi_awareness() -> None:
    if not sys.platform.startswith("win"):
        return

    import ctypes

    try:
        ctypes.windll.shcore.SetProcessDpiAwareness(2)
        return
    except (AttributeError, OSError):
        pass

    try:
        ctypes.windll.user32.SetProcessDPIAware()
    except (AttributeError, OSError):
        # Tk falls back to default scaling
        pass


def main() -> None:
    """Application entry point."""
    _enable_high_dpi_awareness()
    root = tk.Tk()
    WorkdeskGUI(root)
    root.mainloop()


if __name__ == "__main__":
    main()
