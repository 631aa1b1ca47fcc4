from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class RequestLayout:
    """
    Shape of one service request.

    Args:
        endpoint: Endpoint name under /api/.
        value_field: Field that carries the dense value list.
        context_fields: Service field name -> WellContext attribute.
        scalar: Send a single number instead of a list (calculatePwbs).
    """
    endpoint: str
    value_field: str
    context_fields: Dict[str, str]
    scalar: bool = False


_PVT_FIELDS = {'pc': 'pc', 'tc': 'tc', 't': 'tb'}
_WELLBORE_FIELDS = {
    'well_no': 'well_no', 'rg': 'rg', 'pc': 'pc', 'tc': 'tc',
    'h': 'md', 'tts': 'th', 'tws': 'tb',
}
_GAS_FIELDS = {'n2': 'n2', 'co2': 'co2', 'h2s': 'h2s'}

BATCH_PVT = RequestLayout('calculateBatchPVT', 'pressures', {**_PVT_FIELDS, 'rg': 'rg', **_GAS_FIELDS})
BATCH_PB = RequestLayout('calculateBatchPb', 'pts', {**_WELLBORE_FIELDS, **_GAS_FIELDS})
BATCH_PH = RequestLayout('calculateBatchPh', 'pwbs', {**_WELLBORE_FIELDS, **_GAS_FIELDS})

PWBS = RequestLayout('calculatePwbs', 'pts', dict(_WELLBORE_FIELDS), scalar=True)
Z = RequestLayout('calculateZ', 'pressures', dict(_PVT_FIELDS))
BG = RequestLayout('calculateBg', 'pressures', dict(_PVT_FIELDS))
CG = RequestLayout('calculateCg', 'pressures', dict(_PVT_FIELDS))
DENSITY = RequestLayout('calculateDensity', 'pressures', {**_PVT_FIELDS, 'rg': 'rg'})
NIANDU = RequestLayout('calculateNiandu', 'pressures', {**_PVT_FIELDS, 'rg': 'rg', **_GAS_FIELDS})


def build(dense, context, layout):
    """
    Assemble one flat request body from dense values and the well parameters.

    Values are passed through untouched: no unit conversion and no range
    checks (validate the context before calling this).

    Args:
        dense: List of input values (already compacted).
        context: WellContext snapshot.
        layout: RequestLayout describing the endpoint's fields.

    Returns:
        dict ready to be sent as JSON.

    Raises:
        ValueError: If a scalar layout is given anything but exactly one value.
    """
    values = [float(v) for v in dense]
    if layout.scalar:
        if len(values) != 1:
            raise ValueError(f"{layout.endpoint} takes exactly one value, got {len(values)}")
        body = {layout.value_field: values[0]}
    else:
        body = {layout.value_field: values}

    for field, attr in layout.context_fields.items():
        value = getattr(context, attr)
        body[field] = value if attr == 'well_no' else float(value)
    return body
