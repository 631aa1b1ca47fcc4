import tkinter as tk
from tkinter import ttk


def format_cell(value, digits=6):
    """Display text for a grid cell."""
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.{digits}g}"
    return str(value)


class EditableGrid(ttk.Frame):
    """
    A Treeview-based table with in-place editing of selected columns.

    Double-click a cell in an editable column to edit it; Return or focus-out
    commits, Escape cancels. Ctrl+V pastes clipboard lines (e.g. a column
    copied from Excel) downwards from the selected row.

    Args:
        parent: Parent widget.
        headers: Column header strings.
        editable_columns: Column indices the user may edit.
        on_edit: callable(row, col, text) called for every committed edit.
        height: Visible rows.
        col_width: Pixel width per column.

    Example:
        grid = EditableGrid(frame, headers=["P", "Z"], editable_columns={0},
                            on_edit=lambda r, c, text: model.write_cell(r, c, text))
        grid.pack(fill='both', expand=True)
        grid.set_rows([[10.0, 0.91], [None, None]])
    """

    def __init__(self, parent, *, headers, editable_columns=(), on_edit=None,
                 height=15, col_width=120):
        super().__init__(parent)
        self._editable = set(editable_columns)
        self._locked = False
        self._on_edit = on_edit
        self._editor = None
        self._editor_cell = None
        self._col_width = col_width

        self._tree = ttk.Treeview(self, show="headings", height=height, selectmode='browse')
        scrollbar = ttk.Scrollbar(self, command=self._tree.yview)
        self._tree.configure(yscrollcommand=scrollbar.set)
        scrollbar.pack(side='right', fill='y')
        self._tree.pack(fill='both', expand=True)

        self.set_headers(headers)

        self._tree.bind('<Double-1>', self._begin_edit)
        self._tree.bind('<Control-v>', self._paste)
        self._tree.bind('<Control-V>', self._paste)

    # ── Public API ────────────────────────────────────────────

    def set_headers(self, headers):
        self._close_editor(commit=False)
        columns = [f"c{i}" for i in range(len(headers))]
        self._tree.configure(columns=columns)
        for cid, text in zip(columns, headers):
            self._tree.heading(cid, text=text)
            self._tree.column(cid, width=self._col_width, anchor='center')

    def set_rows(self, rows):
        """Replace every row (keeps the selection position when possible)."""
        selected = self.selected_row()
        self._close_editor(commit=False)
        self._tree.delete(*self._tree.get_children())
        for idx, row in enumerate(rows):
            self._tree.insert("", "end", iid=str(idx), values=[format_cell(v) for v in row])
        if selected is not None and selected < len(rows):
            self._tree.selection_set(str(selected))

    def set_cell(self, row, col, value):
        iid = str(row)
        if not self._tree.exists(iid):
            return
        values = list(self._tree.item(iid, 'values'))
        values[col] = format_cell(value)
        self._tree.item(iid, values=values)

    def set_editable(self, editable):
        """Lock or unlock in-place editing and pasting; an open editor is discarded."""
        self._locked = not editable
        if self._locked:
            self._close_editor(commit=False)

    def selected_row(self):
        sel = self._tree.selection()
        return int(sel[0]) if sel else None

    # ── Editing ───────────────────────────────────────────────

    def _begin_edit(self, event):
        if self._tree.identify_region(event.x, event.y) != 'cell':
            return
        iid = self._tree.identify_row(event.y)
        col = int(self._tree.identify_column(event.x)[1:]) - 1
        if self._locked or not iid or col not in self._editable:
            return

        self._close_editor(commit=True)
        bbox = self._tree.bbox(iid, f"#{col + 1}")
        if not bbox:
            return
        x, y, w, h = bbox
        current = self._tree.item(iid, 'values')[col]

        self._editor = ttk.Entry(self._tree)
        self._editor.insert(0, current)
        self._editor.select_range(0, tk.END)
        self._editor.place(x=x, y=y, width=w, height=h)
        self._editor.focus_set()
        self._editor.bind('<Return>', lambda _e: self._close_editor(commit=True))
        self._editor.bind('<FocusOut>', lambda _e: self._close_editor(commit=True))
        self._editor.bind('<Escape>', lambda _e: self._close_editor(commit=False))
        self._editor_cell = (int(iid), col)

    def _close_editor(self, commit):
        editor, self._editor = self._editor, None
        if editor is None:
            return
        row, col = self._editor_cell
        text = editor.get()
        editor.destroy()
        if commit and self._on_edit:
            self._on_edit(row, col, text)

    def _paste(self, _event=None):
        if self._locked or not self._editable or self._on_edit is None:
            return 'break'
        try:
            text = self.clipboard_get()
        except tk.TclError:
            return 'break'
        start = self.selected_row() or 0
        col = min(self._editable)
        lines = text.splitlines()
        for offset, line in enumerate(lines):
            # first tab-separated field only
            self._on_edit(start + offset, col, line.split('\t')[0].strip())
        return 'break'


class GridBinding:
    """
    Keeps an EditableGrid in sync with a FrameGridModel.

    Model listeners may fire on worker threads, so every redraw is scheduled
    on the Tk main loop with after(0, ...).
    """

    def __init__(self, widget, model):
        self.widget = widget
        self.model = model
        model.add_listener(self._on_model_change)
        self.refresh()

    def refresh(self):
        self.widget.set_headers(self.model.headers)
        self.widget.set_rows(self.model.rows())

    def detach(self):
        self.model.remove_listener(self._on_model_change)

    def _on_model_change(self, kind, where):
        if kind == 'cell':
            row, col = where
            value = self.model.read_cell(row, col)
            self.widget.after(0, lambda: self._apply_cell(row, col, value))
        else:
            self.widget.after(0, self._apply_bulk)

    def _apply_cell(self, row, col, value):
        if self.widget.winfo_exists():
            self.widget.set_cell(row, col, value)

    def _apply_bulk(self):
        if self.widget.winfo_exists():
            self.refresh()
