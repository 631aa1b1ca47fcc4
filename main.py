import sys
import tkinter as tk

from logics import config
from UIs.app import GasWellCalculatorApp


def main():
    try:
        print(f"Starting GUI (service: {config.SERVICE_BASE_URL}, mode: {config.CALCULATION_MODE})...")
        root = tk.Tk()
        app = GasWellCalculatorApp(root, skip_login='--no-login' in sys.argv)
        print("GUI ready. Entering mainloop...")
        root.mainloop()
    except Exception as e:
        print("ERROR:", str(e))
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
