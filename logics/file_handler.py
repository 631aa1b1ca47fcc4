import os

import pandas as pd


CSV_ENCODINGS = ['utf-8', 'utf-8-sig', 'gbk', 'latin-1', 'cp1252']


def _read_table(path):
    """Read a CSV (trying several encodings) or Excel file into a DataFrame."""
    filename = os.path.basename(path)
    if path.lower().endswith('.csv'):
        for enc in CSV_ENCODINGS:
            try:
                df = pd.read_csv(path, encoding=enc)
                print(f"[DEBUG] {filename} loaded with encoding: {enc}")
                return df
            except (UnicodeDecodeError, LookupError):
                continue
        raise ValueError(f"Could not load {filename} with any supported encoding")
    return pd.read_excel(path)


def load_pressure_column(path, column=None):
    """
    Load a column of pressure readings from a CSV or Excel file.

    Args:
        path: File path (.csv, .xlsx, .xls).
        column: Column name to use. Defaults to the first column that holds
            at least one numeric value.

    Returns:
        list of cell values in file order. Blank cells become None; other
        cells are passed through untouched so the usual input coercion applies.

    Raises:
        ValueError: If the file has no usable column.
    """
    df = _read_table(path)
    if df.empty and len(df.columns) == 0:
        raise ValueError(f"{os.path.basename(path)} is empty.")

    if column is None:
        for col in df.columns:
            if pd.to_numeric(df[col], errors='coerce').notna().any():
                column = col
                break
        else:
            raise ValueError(f"No numeric column found in {os.path.basename(path)}.")
    elif column not in df.columns:
        raise ValueError(f"Column '{column}' not found in {os.path.basename(path)}.")

    values = df[column].astype(object).where(df[column].notna(), None).tolist()
    print(f"[IMPORT] {len(values)} rows from column '{column}'")
    return values


def export_results(grid, path, context=None, failures=None):
    """
    Export the result grid.

    Excel layout:
        - "Results": the grid, one row per input row (blank rows kept so row
          numbers match the screen).
        - "Well": the well parameters the results were calculated with.
        - "Failures": one line per value that could not be calculated, if any.

    A .csv path writes only the results table.

    Args:
        grid: FrameGridModel (or anything with to_frame()) or a DataFrame.
        path: Output path (.xlsx or .csv).
        context: Optional WellContext.
        failures: Optional list of StageFailure.
    """
    df = grid if isinstance(grid, pd.DataFrame) else grid.to_frame()

    if path.lower().endswith('.csv'):
        df.to_csv(path, index=False, encoding='utf-8-sig')
        print(f"[EXPORT] CSV written ({len(df)} rows)")
        return

    with pd.ExcelWriter(path, engine='xlsxwriter') as writer:
        df.to_excel(writer, sheet_name='Results', index=False)

        if context is not None:
            well = pd.DataFrame(
                [(name, value) for name, value in context.as_dict().items()],
                columns=['Parameter', 'Value'],
            )
            well.to_excel(writer, sheet_name='Well', index=False)

        if failures:
            failed = pd.DataFrame(
                [(f.row + 1, f.stage, f.error_type, f.message) for f in failures],
                columns=['Row', 'Stage', 'Error', 'Message'],
            )
            failed.to_excel(writer, sheet_name='Failures', index=False)
            print(f"[EXPORT] Failures sheet written ({len(failed)} rows)")

    print(f"[EXPORT] Workbook written: {path}")
