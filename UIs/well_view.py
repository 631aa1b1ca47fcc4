import tkinter as tk
from tkinter import ttk

from logics import config
from logics.property_sets import PROPERTY_SETS
from UIs.widgets import EditableGrid, GridBinding


class WellView:
    """Main screen – well lookup, parameter table, pressure grid and actions."""

    def __init__(self, root, session, *, on_load, on_calculate, on_switch_property_set,
                 on_import, on_export, on_params_edited):
        self.root = root
        self.session = session
        self.on_load = on_load
        self.on_calculate = on_calculate
        self.on_switch_property_set = on_switch_property_set
        self.on_import = on_import
        self.on_export = on_export
        self.on_params_edited = on_params_edited

        self._titles = {ps.title: key for key, ps in PROPERTY_SETS.items()}
        self._action_buttons = []
        self._busy = False
        self._build_ui()

    # ── Layout ───────────────────────────────────────────────

    def _build_ui(self):
        # Well lookup
        frame_top = ttk.Frame(self.root)
        frame_top.pack(pady=10, padx=20, fill='x')

        tk.Label(frame_top, text="Well No.:").pack(side='left')
        self.entry_well = ttk.Entry(frame_top, width=20)
        self.entry_well.pack(side='left', padx=5)
        self.entry_well.bind('<Return>', lambda _e: None if self._busy else self._load())

        tk.Label(frame_top, text="Calculation:").pack(side='left', padx=(15, 0))
        self.combo_kind = ttk.Combobox(frame_top, values=list(self._titles), state='readonly', width=25)
        self.combo_kind.current(0)
        self.combo_kind.pack(side='left', padx=5)
        self.combo_kind.bind('<<ComboboxSelected>>', lambda _e: self.on_switch_property_set(self.property_set_key))

        btn_load = ttk.Button(frame_top, text="Load well", command=self._load)
        btn_load.pack(side='left', padx=10)
        self._action_buttons.append(btn_load)

        # Well parameters
        frame_params = ttk.LabelFrame(self.root, text="Well parameters (double-click to edit)", padding=5)
        frame_params.pack(pady=5, padx=20, fill='x')
        self.params_grid = EditableGrid(
            frame_params,
            headers=config.WELL_INFO_HEADERS,
            editable_columns=range(1, len(config.WELL_INFO_HEADERS)),
            on_edit=self.on_params_edited,
            height=1,
            col_width=95,
        )
        self.params_grid.pack(fill='x')

        # Result grid
        frame_grid = ttk.LabelFrame(
            self.root,
            text="Input column: double-click to edit, Ctrl+V to paste from Excel",
            padding=5,
        )
        frame_grid.pack(pady=5, padx=20, fill='both', expand=True)
        self.result_grid = EditableGrid(
            frame_grid,
            headers=self.session.grid.headers,
            editable_columns={0},
            on_edit=self._on_input_edited,
            height=20,
        )
        self.result_grid.pack(fill='both', expand=True)
        self.binding = GridBinding(self.result_grid, self.session.grid)

        # Actions
        frame_actions = ttk.Frame(self.root)
        frame_actions.pack(pady=10)

        tk.Label(frame_actions, text="Mode:").pack(side='left')
        self.combo_mode = ttk.Combobox(
            frame_actions, values=list(config.CALCULATION_MODES), state='readonly', width=11,
        )
        self.combo_mode.set(config.CALCULATION_MODE)
        self.combo_mode.pack(side='left', padx=(4, 15))

        for text, command in (
            ("Calculate", lambda: self.on_calculate(self.property_set_key, self.combo_mode.get())),
            ("Import pressures...", self.on_import),
            ("Export results...", self.on_export),
            ("Clear results", self.session.grid.clear_derived),
        ):
            btn = ttk.Button(frame_actions, text=text, command=command)
            btn.pack(side='left', padx=6)
            self._action_buttons.append(btn)

        self.lbl_status = tk.Label(self.root, text="Load a well to start.", fg="gray", anchor='w')
        self.lbl_status.pack(fill='x', padx=20, pady=(0, 10))

    # ── Public API ───────────────────────────────────────────

    @property
    def property_set_key(self):
        return self._titles[self.combo_kind.get()]

    def show_context(self, context):
        self.params_grid.set_rows([context.to_row()] if context is not None else [])

    def set_busy(self, busy):
        """Lock every input while a request is pending so submissions cannot overlap."""
        self._busy = busy
        state = 'disabled' if busy else 'normal'
        for btn in self._action_buttons:
            btn.config(state=state)
        self.entry_well.config(state=state)
        for combo in (self.combo_kind, self.combo_mode):
            combo.config(state='disabled' if busy else 'readonly')
        self.params_grid.set_editable(not busy)
        self.result_grid.set_editable(not busy)

    def set_status(self, text, color="gray"):
        self.lbl_status.config(text=text, fg=color)

    def destroy(self):
        self.binding.detach()

    # ── Internals ────────────────────────────────────────────

    def _load(self):
        self.on_load(self.entry_well.get(), self.property_set_key)

    def _on_input_edited(self, row, col, text):
        grid = self.session.grid
        grid.ensure_rows(row + 1)
        grid.write_cell(row, col, text.strip() or None)
