import math

from logics.errors import InputError, ValidationError


POSITIVE_FIELDS = ('pc', 'tc', 'tb', 'rg')
PERCENT_FIELDS = ('n2', 'co2', 'h2s')
FINITE_FIELDS = ('md', 'th')

FIELD_LABELS = {
    'md': 'Mid-depth', 'th': 'Wellhead temperature', 'tb': 'Bottom-hole temperature',
    'rg': 'rg', 'pc': 'Pc', 'tc': 'Tc', 'n2': 'N2', 'co2': 'CO2', 'h2s': 'H2S',
}


def _is_finite_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_context(context, required=None):
    """
    Check a WellContext before any request is built from it.

    Rules:
        - every numeric parameter must be a finite number
        - Pc, Tc, bottom-hole temperature and rg must be > 0
        - N2, CO2 and H2S must lie within [0, 100]

    Args:
        context: WellContext to check.
        required: Optional iterable of field names to check. Defaults to all.

    Raises:
        InputError: If context is None (no well loaded).
        ValidationError: On the first offending field.
    """
    if context is None:
        raise InputError("Load a well first.")

    names = tuple(required) if required is not None else POSITIVE_FIELDS + PERCENT_FIELDS + FINITE_FIELDS

    for name in names:
        value = getattr(context, name)
        if not _is_finite_number(value):
            raise ValidationError(
                f"{FIELD_LABELS[name]} must be a finite number (got {value!r}).", field=name,
            )

    for name in POSITIVE_FIELDS:
        if name in names and getattr(context, name) <= 0:
            raise ValidationError(f"{FIELD_LABELS[name]} must be greater than 0.", field=name)

    for name in PERCENT_FIELDS:
        if name in names and not 0 <= getattr(context, name) <= 100:
            raise ValidationError(f"{FIELD_LABELS[name]} must be between 0 and 100 %.", field=name)

    return context


def validate_well_no(well_no):
    """Return the stripped well number, or raise InputError if it is empty."""
    well_no = (well_no or '').strip()
    if not well_no:
        raise InputError("Enter a well number.")
    return well_no
