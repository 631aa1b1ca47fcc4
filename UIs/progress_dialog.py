import tkinter as tk
from tkinter import ttk
import threading
import traceback

from logics.pipeline import StageFailure


class ProgressDialog:
    """
    Modal window for one submission (well load or calculation).

    The work runs on a daemon thread. It receives two hooks, both safe to call
    from any thread: progress(current, total, label) moves the bar, and
    on_event(event) counts StageFailure events so failing cells show up
    while the remaining rows are still running. Everything touching Tk is
    posted back onto the main loop with root.after.

    Usage:
        def work(progress, on_event):
            return calculate(session, client, PVT, on_event=on_event,
                             progress_callback=progress)

        ProgressDialog(root, "Calculating", "PVT properties").run(
            work, on_success=show_report, on_error=show_error,
        )

    Args:
        root: Parent Tk window.
        title: Window title.
        heading: Bold text naming what is being computed.
        unit: Word used in the status line, e.g. "Row" → "Row: row 3 (3/12)".
    """

    def __init__(self, root, title, heading, unit="Step"):
        self._root = root
        self._unit = unit
        self._failure_count = 0

        self._dialog = tk.Toplevel(root)
        self._dialog.title(title)
        self._dialog.geometry("400x160")
        self._dialog.resizable(False, False)
        self._dialog.transient(root)
        self._dialog.grab_set()
        # Not closable while the worker runs
        self._dialog.protocol("WM_DELETE_WINDOW", lambda: None)

        tk.Label(self._dialog, text=heading, font=("Arial", 12, "bold")).pack(pady=(10, 4))
        self._lbl_status = tk.Label(self._dialog, text=f"{unit}: waiting for the service...", fg="blue")
        self._lbl_status.pack()
        self._lbl_failures = tk.Label(self._dialog, text="", fg="red")
        self._lbl_failures.pack()

        self._bar = ttk.Progressbar(self._dialog, mode='indeterminate', length=320)
        self._bar.pack(pady=10, padx=20)
        self._bar.start(12)

    def run(self, work, on_success, on_error):
        """
        Start work(progress, on_event) on a worker thread.

        on_success(result) or on_error(exception) is called on the main loop
        after the dialog has closed.
        """
        def worker():
            try:
                result = work(self._progress, self._event)
            except Exception as e:
                print(f"\n[ERROR] {e}")
                traceback.print_exc()
                self._post(self._finish, on_error, e)
            else:
                self._post(self._finish, on_success, result)

        threading.Thread(target=worker, daemon=True).start()

    # ── Worker-side hooks ────────────────────────────────────

    def _progress(self, current, total, label):
        self._post(self._show_progress, current, total, label)

    def _event(self, event):
        if isinstance(event, StageFailure):
            self._post(self._show_failure, event)

    def _post(self, fn, *args):
        self._root.after(0, lambda: fn(*args))

    # ── Main-loop side ───────────────────────────────────────

    def _show_progress(self, current, total, label):
        if not self._dialog.winfo_exists():
            return
        self._lbl_status.config(text=f"{self._unit}: {label}  ({current}/{total})")
        if total > 1 and str(self._bar['mode']) != 'determinate':
            self._bar.stop()
            self._bar.config(mode='determinate', maximum=total)
        if total > 1:
            self._bar['value'] = current

    def _show_failure(self, failure):
        if not self._dialog.winfo_exists():
            return
        self._failure_count += 1
        self._lbl_failures.config(
            text=f"{self._failure_count} value(s) failed, last: row {failure.row + 1} {failure.stage}"
        )

    def _finish(self, callback, payload):
        if self._dialog.winfo_exists():
            self._bar.stop()
            self._dialog.destroy()
        callback(payload)
