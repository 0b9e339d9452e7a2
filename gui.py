"""
Graphical user interface for the Workdesk Toolkit application.

Key capabilities
----------------
- Autocopier: type a pasted series list into another program, re-typing the
  companion value (usually a date) after every item
- Cancel a run with the button or the global cancel hotkey (ESC by default)
- Notepad with autosave and automatic refresh of HH:MM times in the text
- Persist user preferences (delays, countdown, keyboard backend, hotkey)
"""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox, scrolledtext, filedialog
from pathlib import Path
from typing import Optional

from automation import InjectionController, KeyboardBackendError, create_emitter
from hotkey_manager import HotkeyManager
from logger import LogEntry, StatusLogger
from models import (
    ApplicationSettings,
    BusyError,
    KeyboardBackend,
    ValidationError,
)
from notepad import NotepadDocument
from settings_manager import SettingsManager


class WorkdeskGUI:
    """Tkinter based GUI that orchestrates all application services."""

    TIME_REFRESH_MS = 1000
    STATUS_RESET_MS = 2000
    DEFAULT_WINDOW_SIZE = (1100, 720)

    def __init__(self, root: tk.Tk, settings_manager: Optional[SettingsManager] = None):
        self.root = root
        self.root.title("Workdesk Toolkit")
        width, height = self.DEFAULT_WINDOW_SIZE
        self.root.geometry(f"{width}x{height}")

        self.settings_manager = settings_manager or SettingsManager()
        self.settings: ApplicationSettings = self.settings_manager.load()

        self.style = ttk.Style()
        self._configure_styles()

        # Runtime state --------------------------------------------------
        self.logger = StatusLogger()
        self.controller: Optional[InjectionController] = None
        self._controller_backend: Optional[KeyboardBackend] = None
        self.hotkey_manager = HotkeyManager(cancel_hotkey=self.settings.cancel_hotkey)
        self.notepad = NotepadDocument(
            self.settings.notepad_path, idle_seconds=self.settings.notepad_idle_seconds
        )
        self._time_job: Optional[str] = None
        self._autosave_job: Optional[str] = None
        self._suppress_modified = False

        # Tk variables ---------------------------------------------------
        self.companion_var = tk.StringVar(value=self.settings.last_companion_value)
        self.delay_var = tk.IntVar(value=self.settings.per_step_delay_ms)
        self.countdown_var = tk.IntVar(value=self.settings.countdown_seconds)
        self.backend_var = tk.StringVar(value=self.settings.keyboard_backend.value)
        self.cancel_hotkey_var = tk.StringVar(value=self.settings.cancel_hotkey)
        self.status_var = tk.StringVar(value="Status: Waiting for action...")
        self.progress_var = tk.StringVar(value="Copied: 0 / 0")
        self.notepad_status_var = tk.StringVar(value="Status: Ready")
        self.clock_var = tk.StringVar(value="")

        # UI --------------------------------------------------------------
        self._build_ui()
        self.logger.subscribe(self._on_log_entry)

        # Services -------------------------------------------------------
        if self.settings_manager.last_error:
            self.logger.log_warning(self.settings_manager.last_error)
        self._setup_hotkeys()
        self._load_notepad()
        self._schedule_time_refresh()
        self._schedule_autosave()

        self.root.protocol("WM_DELETE_WINDOW", self._on_closing)

    def _configure_styles(self) -> None:
        try:
            self.style.theme_use("clam")
        except tk.TclError:
            pass

        base_font = ("Segoe UI", 10)
        self.style.configure(".", font=base_font)
        self.style.configure("Header.TLabel", font=("Segoe UI", 15, "bold"))
        self.style.configure("Card.TLabelframe", borderwidth=1, relief="solid")
        self.style.configure("Card.TLabelframe.Label", font=("Segoe UI", 11, "bold"))
        self.style.configure("App.TNotebook.Tab", padding=(16, 8), font=("Segoe UI", 10, "bold"))
        self.style.configure("Accent.TButton", padding=(10, 7))
        self.style.configure("Danger.TButton", padding=(10, 7))
        self.style.configure("Ghost.TButton", padding=(8, 6))
        self.style.configure("Hint.TLabel", font=("Segoe UI", 9))

    def _build_ui(self) -> None:
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)

        container = ttk.Frame(self.root, padding=18)
        container.grid(row=0, column=0, sticky="nsew")
        container.columnconfigure(0, weight=1)
        container.rowconfigure(0, weight=3)
        container.rowconfigure(1, weight=1)

        notebook = ttk.Notebook(container, style="App.TNotebook")
        notebook.grid(row=0, column=0, sticky="nsew")

        autocopier_tab = ttk.Frame(notebook, padding=12)
        notepad_tab = ttk.Frame(notebook, padding=12)
        notebook.add(autocopier_tab, text="Autocopier")
        notebook.add(notepad_tab, text="Notepad")

        self._build_autocopier_tab(autocopier_tab)
        self._build_notepad_tab(notepad_tab)
        self._build_status_section(container)

    # ------------------------------------------------------------------
    # Autocopier tab
    # ------------------------------------------------------------------
    def _build_autocopier_tab(self, parent: ttk.Frame) -> None:
        parent.columnconfigure(0, weight=3)
        parent.columnconfigure(1, weight=2)
        parent.rowconfigure(1, weight=1)

        ttk.Label(parent, text="Series Autocopier", style="Header.TLabel").grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 12)
        )

        input_frame = ttk.LabelFrame(parent, text="Input", padding=14, style="Card.TLabelframe")
        input_frame.grid(row=1, column=0, sticky="nsew", padx=(0, 12))
        input_frame.columnconfigure(0, weight=1)
        input_frame.rowconfigure(1, weight=1)

        ttk.Label(input_frame, text="Series (separated by spaces or new lines):").grid(row=0, column=0, sticky="w")
        self.series_text = scrolledtext.ScrolledText(input_frame, height=10, wrap=tk.WORD)
        self.series_text.grid(row=1, column=0, sticky="nsew", pady=(4, 10))

        ttk.Label(input_frame, text="Date (DDMMYYYY):").grid(row=2, column=0, sticky="w")
        ttk.Entry(input_frame, textvariable=self.companion_var).grid(row=3, column=0, sticky="ew", pady=(4, 0))

        controls = ttk.LabelFrame(parent, text="Controls", padding=14, style="Card.TLabelframe")
        controls.grid(row=1, column=1, sticky="nsew")
        controls.columnconfigure(1, weight=1)

        ttk.Label(controls, text="Delay (ms):").grid(row=0, column=0, sticky="w")
        ttk.Spinbox(controls, from_=0, to=5000, increment=10, textvariable=self.delay_var, width=8).grid(
            row=0, column=1, sticky="w", pady=2
        )
        ttk.Label(controls, text="Countdown (s):").grid(row=1, column=0, sticky="w")
        ttk.Spinbox(controls, from_=0, to=60, textvariable=self.countdown_var, width=8).grid(
            row=1, column=1, sticky="w", pady=2
        )
        ttk.Label(controls, text="Keyboard backend:").grid(row=2, column=0, sticky="w")
        ttk.Combobox(
            controls,
            textvariable=self.backend_var,
            values=[backend.value for backend in KeyboardBackend],
            state="readonly",
            width=12,
        ).grid(row=2, column=1, sticky="w", pady=2)
        ttk.Label(controls, text="Cancel hotkey:").grid(row=3, column=0, sticky="w")
        hotkey_row = ttk.Frame(controls)
        hotkey_row.grid(row=3, column=1, sticky="w", pady=2)
        ttk.Entry(hotkey_row, textvariable=self.cancel_hotkey_var, width=10).pack(side=tk.LEFT)
        ttk.Button(hotkey_row, text="Apply", command=self._apply_hotkey, style="Ghost.TButton").pack(
            side=tk.LEFT, padx=(6, 0)
        )

        buttons = ttk.Frame(controls)
        buttons.grid(row=4, column=0, columnspan=2, sticky="ew", pady=(12, 0))
        buttons.columnconfigure((0, 1), weight=1)
        ttk.Button(buttons, text="Start", command=self._start_autocopy, style="Accent.TButton").grid(
            row=0, column=0, sticky="ew", padx=(0, 6)
        )
        ttk.Button(buttons, text="Cancel", command=self._cancel_autocopy, style="Danger.TButton").grid(
            row=0, column=1, sticky="ew", padx=(6, 0)
        )

        ttk.Separator(controls, orient=tk.HORIZONTAL).grid(row=5, column=0, columnspan=2, sticky="ew", pady=10)
        ttk.Label(controls, textvariable=self.status_var).grid(row=6, column=0, columnspan=2, sticky="w")
        ttk.Label(controls, textvariable=self.progress_var).grid(row=7, column=0, columnspan=2, sticky="w")
        ttk.Label(
            controls,
            text="Focus the first target field during the countdown.\nPress the cancel hotkey to stop at any time.",
            style="Hint.TLabel",
        ).grid(row=8, column=0, columnspan=2, sticky="w", pady=(10, 0))

    def _get_controller(self) -> InjectionController:
        backend = KeyboardBackend(self.backend_var.get())
        if self.controller is None or self._controller_backend != backend:
            controller = InjectionController(create_emitter(backend))
            controller.register_status_callback(self._on_run_status)
            controller.register_progress_callback(self._on_run_progress)
            self.controller = controller
            self._controller_backend = backend
        return self.controller

    def _start_autocopy(self) -> None:
        if self.controller and self.controller.is_running():
            self.logger.log_warning("A run is already in progress.")
            return

        try:
            self._sync_settings_from_vars()
            config = self.settings.build_run_configuration(
                self.series_text.get("1.0", tk.END), self.companion_var.get()
            )
        except (ValidationError, tk.TclError, ValueError) as exc:
            messagebox.showerror("Invalid input", str(exc))
            return

        try:
            controller = self._get_controller()
            controller.start(config)
        except KeyboardBackendError as exc:
            self.logger.log_error(str(exc))
            messagebox.showerror("Keyboard backend", str(exc))
            return
        except BusyError as exc:
            self.logger.log_warning(str(exc))
            return

        self.progress_var.set(f"Copied: 0 / {config.total}")
        self.status_var.set(f"Status: Starting in {config.countdown_seconds} seconds...")
        self.logger.log_info(f"Run started with {config.total} series.")
        self._persist_settings()

    def _cancel_autocopy(self, reason: str = "button") -> None:
        if self.controller and self.controller.cancel(reason):
            self.logger.log_info(f"Cancel requested ({reason}).")

    def _on_run_status(self, message: str) -> None:
        # Called from the worker thread
        self.root.after(0, lambda: self._show_run_status(message))

    def _show_run_status(self, message: str) -> None:
        self.status_var.set(f"Status: {message}")
        if message.startswith("failed"):
            self.logger.log_error(message)
        elif not message.startswith("starting in"):
            self.logger.log_info(message)

    def _on_run_progress(self, completed: int, total: int) -> None:
        self.root.after(0, lambda: self.progress_var.set(f"Copied: {completed} / {total}"))

    # ------------------------------------------------------------------
    # Hotkeys
    # ------------------------------------------------------------------
    def _setup_hotkeys(self) -> None:
        # The listener thread may call this at any time; cancel() is thread safe
        self.hotkey_manager.register_cancel_callback(lambda: self._cancel_autocopy("hotkey"))
        if not self.hotkey_manager.enable_hotkeys():
            self.logger.log_warning(
                f"Cancel hotkey could not be registered globally: {self.hotkey_manager.last_error}"
            )

    def _apply_hotkey(self) -> None:
        hotkey = self.cancel_hotkey_var.get().strip() or "esc"
        if self.hotkey_manager.update_hotkey(hotkey):
            self.logger.log_info(f"Cancel hotkey set to {hotkey}")
            self._persist_settings()
        else:
            messagebox.showwarning("Hotkey", f"Hotkey could not be updated: {self.hotkey_manager.last_error}")

    # ------------------------------------------------------------------
    # Notepad tab
    # ------------------------------------------------------------------
    def _build_notepad_tab(self, parent: ttk.Frame) -> None:
        parent.columnconfigure(0, weight=1)
        parent.rowconfigure(2, weight=1)

        ttk.Label(parent, text="Notepad with live times", style="Header.TLabel").grid(
            row=0, column=0, sticky="w", pady=(0, 12)
        )

        toolbar = ttk.Frame(parent)
        toolbar.grid(row=1, column=0, sticky="w", pady=(0, 8))
        ttk.Button(toolbar, text="Save now", command=self._save_notepad, style="Ghost.TButton").pack(side=tk.LEFT)
        ttk.Button(toolbar, text="Reload", command=self._reload_notepad, style="Ghost.TButton").pack(
            side=tk.LEFT, padx=6
        )
        ttk.Button(toolbar, text="Clear", command=self._clear_notepad, style="Ghost.TButton").pack(side=tk.LEFT)

        self.notepad_text = scrolledtext.ScrolledText(parent, wrap=tk.NONE, undo=True)
        self.notepad_text.grid(row=2, column=0, sticky="nsew")
        self.notepad_text.bind("<<Modified>>", self._on_notepad_modified)

        footer = ttk.Frame(parent)
        footer.grid(row=3, column=0, sticky="ew", pady=(8, 0))
        ttk.Label(footer, textvariable=self.notepad_status_var).pack(side=tk.LEFT)
        ttk.Label(footer, textvariable=self.clock_var).pack(side=tk.RIGHT)

    def _notepad_contents(self) -> str:
        # Text widgets always append a trailing newline
        return self.notepad_text.get("1.0", "end-1c")

    def _set_notepad_contents(self, text: str) -> None:
        cursor = self.notepad_text.index(tk.INSERT)
        self._suppress_modified = True
        self.notepad_text.delete("1.0", tk.END)
        self.notepad_text.insert("1.0", text)
        self.notepad_text.mark_set(tk.INSERT, cursor)
        self.notepad_text.edit_modified(False)
        self._suppress_modified = False

    def _on_notepad_modified(self, _event=None) -> None:
        if not self.notepad_text.edit_modified():
            return
        self.notepad_text.edit_modified(False)
        if self._suppress_modified:
            return
        self.notepad.mark_edited(self._notepad_contents())
        self.notepad_status_var.set("Status: Modified (autosave pending)")

    def _load_notepad(self) -> None:
        try:
            self._set_notepad_contents(self.notepad.load())
        except OSError as exc:
            self.logger.log_error(f"Notepad could not be loaded: {exc}")

    def _save_notepad(self) -> None:
        try:
            if self.notepad.save(self._notepad_contents()):
                self._flash_notepad_status("Status: Saved manually")
        except OSError as exc:
            self.logger.log_error(f"Notepad could not be saved: {exc}")

    def _reload_notepad(self) -> None:
        self._load_notepad()
        self._flash_notepad_status("Status: Reloaded from file")

    def _clear_notepad(self) -> None:
        if messagebox.askyesno("Confirm", "Clear the whole notepad?"):
            self._set_notepad_contents("")
            self.notepad.mark_edited("")
            self.notepad_status_var.set("Status: Cleared")

    def _flash_notepad_status(self, message: str) -> None:
        self.notepad_status_var.set(message)
        self.root.after(self.STATUS_RESET_MS, lambda: self.notepad_status_var.set("Status: Ready"))

    def _schedule_time_refresh(self) -> None:
        def tick() -> None:
            self.clock_var.set(f"Last update: {self.notepad.now().strftime('%H:%M:%S')}")
            updated = self.notepad.refresh_timestamps(self._notepad_contents())
            if updated is not None:
                self._set_notepad_contents(updated)
            self._time_job = self.root.after(self.TIME_REFRESH_MS, tick)

        tick()

    def _schedule_autosave(self) -> None:
        interval_ms = max(1, self.settings.notepad_autosave_seconds) * 1000

        def tick() -> None:
            if self.notepad.needs_autosave():
                try:
                    if self.notepad.save():
                        self.notepad_status_var.set("Status: Saved automatically")
                except OSError as exc:
                    self.logger.log_error(f"Autosave failed: {exc}")
            self._autosave_job = self.root.after(interval_ms, tick)

        self._autosave_job = self.root.after(interval_ms, tick)

    # ------------------------------------------------------------------
    # Log pane
    # ------------------------------------------------------------------
    def _build_status_section(self, parent: ttk.Frame) -> None:
        frame = ttk.LabelFrame(parent, text="Log", padding=14, style="Card.TLabelframe")
        frame.grid(row=1, column=0, sticky="nsew", pady=(12, 0))
        frame.columnconfigure(0, weight=1)
        frame.rowconfigure(0, weight=1)

        self.log_text = scrolledtext.ScrolledText(frame, height=6, state=tk.DISABLED, wrap=tk.WORD)
        self.log_text.grid(row=0, column=0, sticky="nsew")

        button_bar = ttk.Frame(frame)
        button_bar.grid(row=1, column=0, sticky="e", pady=(8, 0))
        ttk.Button(button_bar, text="Clear log", command=self._clear_log_output, style="Ghost.TButton").pack(
            side=tk.LEFT, padx=(0, 6)
        )
        ttk.Button(button_bar, text="Export log", command=self._export_logs, style="Ghost.TButton").pack(
            side=tk.LEFT, padx=(0, 6)
        )
        ttk.Button(button_bar, text="Reset settings", command=self._reset_settings, style="Ghost.TButton").pack(
            side=tk.LEFT
        )

    def _on_log_entry(self, entry: LogEntry) -> None:
        self.root.after(0, lambda: self._append_log_line(str(entry)))

    def _append_log_line(self, line: str) -> None:
        self.log_text.configure(state=tk.NORMAL)
        self.log_text.insert(tk.END, line + "\n")
        self.log_text.see(tk.END)
        self.log_text.configure(state=tk.DISABLED)

    def _clear_log_output(self) -> None:
        self.log_text.configure(state=tk.NORMAL)
        self.log_text.delete("1.0", tk.END)
        self.log_text.configure(state=tk.DISABLED)
        self.logger.clear_logs()

    def _export_logs(self) -> None:
        path = filedialog.asksaveasfilename(
            defaultextension=".txt",
            filetypes=[("Text files", "*.txt"), ("All files", "*.*")],
        )
        if not path:
            return
        error = self.logger.export_logs_to_file(path)
        if error is None:
            messagebox.showinfo("Export", "Log exported successfully.")
        else:
            messagebox.showerror("Export", f"Log could not be exported: {error}")

    # ------------------------------------------------------------------
    # Settings & shutdown
    # ------------------------------------------------------------------
    def _sync_settings_from_vars(self) -> None:
        self.settings.per_step_delay_ms = max(0, int(self.delay_var.get()))
        self.settings.countdown_seconds = max(0, int(self.countdown_var.get()))
        self.settings.keyboard_backend = KeyboardBackend(self.backend_var.get())
        self.settings.cancel_hotkey = self.cancel_hotkey_var.get().strip() or "esc"
        self.settings.last_companion_value = self.companion_var.get().strip()
        self.settings.notepad_path = str(Path(self.notepad.path))

    def _persist_settings(self) -> None:
        try:
            self._sync_settings_from_vars()
            self.settings_manager.save(self.settings)
        except (OSError, ValueError, tk.TclError) as exc:
            self.logger.log_error(f"Settings could not be saved: {exc}")

    def _reset_settings(self) -> None:
        if not messagebox.askyesno("Confirm", "Restore the default settings?"):
            return
        try:
            self.settings = self.settings_manager.reset()
        except OSError as exc:
            self.logger.log_error(f"Settings could not be reset: {exc}")
            return
        self.delay_var.set(self.settings.per_step_delay_ms)
        self.countdown_var.set(self.settings.countdown_seconds)
        self.backend_var.set(self.settings.keyboard_backend.value)
        self.companion_var.set(self.settings.last_companion_value)
        self.cancel_hotkey_var.set(self.settings.cancel_hotkey)
        if not self.hotkey_manager.update_hotkey(self.settings.cancel_hotkey):
            self.logger.log_warning(f"Hotkey could not be updated: {self.hotkey_manager.last_error}")
        self.logger.log_info(f"Settings restored to defaults ({self.settings_manager.path}).")

    def _on_closing(self) -> None:
        if self.controller and self.controller.is_running():
            state = self.controller.stop()
            if not state.is_terminal():
                self.logger.log_warning("Run did not stop within the shutdown timeout.")
        self.hotkey_manager.disable_hotkeys()
        for job in (self._time_job, self._autosave_job):
            if job:
                self.root.after_cancel(job)
        if self.notepad.is_dirty:
            try:
                self.notepad.save(self._notepad_contents())
            except OSError as exc:
                self.logger.log_error(f"Notepad could not be saved: {exc}")
        self._persist_settings()
        self.root.destroy()
