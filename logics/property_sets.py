"""
The three calculations offered by the application.

Each property set bundles what differs between them: grid headers, the
batch endpoint, how a batch result item maps onto a grid row, and the stage
chain used when the batch endpoint is unavailable.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from logics import request_builder as rb
from logics.pipeline import Stage, ratio_stage, remote_stage
from logics.reconciler import inverse, make_row_mapper


@dataclass(frozen=True)
class PropertySet:
    key: str
    title: str
    headers: Tuple[str, ...]
    batch_layout: rb.RequestLayout
    row_mapper: Callable
    stages: Tuple[Stage, ...] = ()
    input_label: Optional[str] = None

    @property
    def supports_sequential(self):
        return bool(self.stages)


PVT = PropertySet(
    key='pvt',
    title='Gas PVT properties',
    headers=('Pressure (MPa)', 'Z', 'P/Z', 'Bg', 'Viscosity (mPa·s)', 'Cg (1/MPa)', 'Density (kg/m³)'),
    batch_layout=rb.BATCH_PVT,
    row_mapper=make_row_mapper([
        ('z', None), ('p_over_z', None), ('bg', None),
        ('niandu', None), ('cg', None), ('density', None),
    ]),
    stages=(
        remote_stage('z', rb.Z, column=1),
        ratio_stage('p_over_z', 'input', 'z', column=2),
        remote_stage('bg', rb.BG, column=3),
        remote_stage('niandu', rb.NIANDU, column=4),
        remote_stage('cg', rb.CG, column=5),
        remote_stage('density', rb.DENSITY, column=6),
    ),
    input_label='pressure',
)

# Bottom-hole pressure from wellhead pressure. Every property after the first
# is evaluated at the computed bottom-hole pressure.
BOTTOM_HOLE = PropertySet(
    key='pb',
    title='Bottom-hole pressure',
    headers=('Wellhead P (MPa)', 'Bottom-hole P (MPa)', 'Z', 'P/Z', '1/Bg', 'μ (mPa·s)', 'Cg (1/MPa)'),
    batch_layout=rb.BATCH_PB,
    row_mapper=make_row_mapper([
        ('pwbs', None), ('z', None), ('p_over_z', None),
        ('bg', inverse), ('niandu', None), ('cg', None),
    ]),
    stages=(
        remote_stage('pwbs', rb.PWBS, column=1),
        remote_stage('z', rb.Z, source='pwbs', column=2),
        ratio_stage('p_over_z', 'pwbs', 'z', column=3),
        remote_stage('bg', rb.BG, source='pwbs', column=4, display=inverse),
        remote_stage('niandu', rb.NIANDU, source='pwbs', column=5),
        remote_stage('cg', rb.CG, source='pwbs', column=6),
    ),
    input_label='wellhead pressure',
)

# Wellhead pressure from bottom-hole pressure. There is no single-value
# wellhead endpoint, so this set is batch only.
WELLHEAD = PropertySet(
    key='ph',
    title='Wellhead pressure',
    headers=('Bottom-hole P (MPa)', 'Wellhead P (MPa)', 'Z', 'P/Z', '1/Bg', 'μ (mPa·s)', 'Cg (1/MPa)'),
    batch_layout=rb.BATCH_PH,
    row_mapper=make_row_mapper([
        ('ph', None), ('z', None), ('p_over_z', None),
        ('bg', inverse), ('niandu', None), ('cg', None),
    ]),
    input_label='bottom-hole pressure',
)

PROPERTY_SETS = {ps.key: ps for ps in (PVT, BOTTOM_HOLE, WELLHEAD)}


def get_property_set(key):
    try:
        return PROPERTY_SETS[key]
    except KeyError:
        raise ValueError(f"Unknown calculation '{key}'. Choose one of: {', '.join(PROPERTY_SETS)}")
