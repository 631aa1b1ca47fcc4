import tkinter as tk
from tkinter import ttk
import threading

from logics.errors import CalculationError


class LoginView:
    """First screen – sign in against the calculation service."""

    def __init__(self, root, client, on_success):
        self.root = root
        self.client = client
        self.on_success = on_success

        self._build_ui()

    def _build_ui(self):
        frame = ttk.Frame(self.root)
        frame.pack(pady=60, padx=20)

        tk.Label(frame, text="Gas Well Calculator – Sign in", font=("Arial", 14, "bold")).grid(
            row=0, column=0, columnspan=2, pady=(0, 20),
        )

        tk.Label(frame, text="Username:").grid(row=1, column=0, sticky='e', pady=4)
        self.entry_user = ttk.Entry(frame, width=30)
        self.entry_user.grid(row=1, column=1, pady=4)

        tk.Label(frame, text="Password:").grid(row=2, column=0, sticky='e', pady=4)
        self.entry_password = ttk.Entry(frame, width=30, show="*")
        self.entry_password.grid(row=2, column=1, pady=4)
        self.entry_password.bind('<Return>', lambda _e: self._submit())

        self.btn_login = ttk.Button(frame, text="Sign in", command=self._submit)
        self.btn_login.grid(row=3, column=0, columnspan=2, pady=15)

        self.lbl_error = tk.Label(frame, text="", fg="red")
        self.lbl_error.grid(row=4, column=0, columnspan=2)

        self.entry_user.focus_set()

    def _submit(self):
        username = self.entry_user.get().strip()
        password = self.entry_password.get()
        if not username or not password:
            self.lbl_error.config(text="Enter username and password.")
            return

        self.btn_login.config(state='disabled')
        self.lbl_error.config(text="")

        def check():
            try:
                ok, error = self.client.login(username, password), None
            except CalculationError as e:
                ok, error = False, str(e)
            self.root.after(0, lambda: self._done(ok, error))

        threading.Thread(target=check, daemon=True).start()

    def _done(self, ok, error):
        if not self.btn_login.winfo_exists():
            return
        self.btn_login.config(state='normal')
        if ok:
            self.on_success()
        elif error:
            self.lbl_error.config(text=f"Service unavailable: {error}")
        else:
            self.lbl_error.config(text="Wrong username or password.")
