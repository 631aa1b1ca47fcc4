from tkinter import messagebox, filedialog

from logics.calculator import calculate, load_well
from logics.data_model import CalculationSession, WellContext
from logics.errors import (
    CalculationError, ContractError, InputError, TransportError, ValidationError,
)
from logics.file_handler import export_results, load_pressure_column
from logics.property_sets import PVT, get_property_set
from logics.service_client import CalcServiceClient

from UIs.login_view import LoginView
from UIs.progress_dialog import ProgressDialog
from UIs.well_view import WellView


ERROR_TITLES = {
    InputError: "Missing input",
    ValidationError: "Invalid well parameters",
    TransportError: "Service error",
    ContractError: "Unexpected service response",
}


class GasWellCalculatorApp:
    """Main application controller that manages navigation between views."""

    def __init__(self, root, client=None, skip_login=False):
        self.root = root
        self.root.title("Gas Well Calculator – PVT / Bottom-hole / Wellhead pressure")
        self.root.geometry("1100x800")
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

        self.client = client or CalcServiceClient()
        self.session = CalculationSession(headers=PVT.headers)
        self.view = None
        self._last_failures = []

        if skip_login:
            self.show_well_view()
        else:
            self.show_login()

    # ── Navigation ──────────────────────────────────────────

    def show_login(self):
        self._clear_window()
        LoginView(self.root, self.client, on_success=self.show_well_view)

    def show_well_view(self):
        self._clear_window()
        self.view = WellView(
            self.root,
            self.session,
            on_load=self._on_load_well,
            on_calculate=self._on_calculate,
            on_switch_property_set=self._on_switch_property_set,
            on_import=self._on_import,
            on_export=self._on_export,
            on_params_edited=self._on_params_edited,
        )

    # ── Logic callbacks ─────────────────────────────────────

    def _on_load_well(self, well_no, property_set_key):
        property_set = get_property_set(property_set_key)
        self.view.set_busy(True)

        def run(progress_cb, _on_event):
            progress_cb(0, 1, well_no)
            return load_well(self.session, self.client, well_no, property_set)

        def on_success(_stamp):
            self.view.set_busy(False)
            self._last_failures = []
            self.view.show_context(self.session.context)
            self.view.set_status(f"Well {self.session.context.well_no} loaded. Enter values in the first column.")

        ProgressDialog(self.root, "Loading well", "Fetching well data...", "Well").run(
            run, on_success=on_success, on_error=self._on_error,
        )

    def _on_calculate(self, property_set_key, mode):
        if not self.session.is_initialized:
            messagebox.showerror("Missing input", 'Click "Load well" first.')
            return

        property_set = get_property_set(property_set_key)
        self.view.set_busy(True)

        def run(progress_cb, on_event):
            return calculate(
                self.session, self.client, property_set,
                mode=mode, on_event=on_event, progress_callback=progress_cb,
            )

        def on_success(report):
            self.view.set_busy(False)
            self._last_failures = list(report.failures)
            color = "orange" if report.partial or report.stale else "green"
            self.view.set_status(report.summary(), color)
            if report.failures and not report.stale:
                lines = [f"Row {f.row + 1} – {f.stage}: {f.message}" for f in report.failures[:10]]
                if len(report.failures) > 10:
                    lines.append(f"... and {len(report.failures) - 10} more")
                messagebox.showwarning("Partial results", "\n".join(lines))

        ProgressDialog(self.root, "Calculating", f"{property_set.title}...", "Progress").run(
            run, on_success=on_success, on_error=self._on_error,
        )

    def _on_switch_property_set(self, property_set_key):
        property_set = get_property_set(property_set_key)
        self.session.switch_headers(property_set.headers)
        self.view.set_status(f"{property_set.title}: enter {property_set.input_label} values (MPa).")

    def _on_params_edited(self, row, col, text):
        if self.session.context is None:
            return
        values = self.session.context.to_row()
        values[col] = text
        context = WellContext.from_row(values)
        self.session.update_context(context)
        self.view.show_context(context)

    def _on_import(self):
        path = filedialog.askopenfilename(filetypes=[("Excel/CSV files", "*.xlsx *.xls *.csv")])
        if not path:
            return
        try:
            values = load_pressure_column(path)
        except Exception as e:
            messagebox.showerror("Import failed", str(e))
            return
        self.session.grid.set_input_column(values)
        self.view.set_status(f"Imported {len(values)} rows from {path}")

    def _on_export(self):
        path = filedialog.asksaveasfilename(
            defaultextension=".xlsx",
            filetypes=[("Excel", "*.xlsx"), ("CSV", "*.csv")],
        )
        if path:
            try:
                export_results(self.session.grid, path, self.session.context, self._last_failures)
                messagebox.showinfo("Export", f"Saved: {path}")
            except Exception as e:
                messagebox.showerror("Export failed", str(e))

    def _on_error(self, error):
        if self.view is not None:
            self.view.set_busy(False)
            self.view.set_status(str(error), "red")
        title = next(
            (t for cls, t in ERROR_TITLES.items() if isinstance(error, cls)),
            "Calculation error" if isinstance(error, CalculationError) else "Unexpected error",
        )
        messagebox.showerror(title, str(error))

    # ── Helpers ──────────────────────────────────────────────

    def _clear_window(self):
        if self.view is not None:
            self.view.destroy()
            self.view = None
        for widget in self.root.winfo_children():
            widget.destroy()

    def _on_close(self):
        self.client.close()
        self.root.destroy()
