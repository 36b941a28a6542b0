"""Published result data structures."""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd


def freeze_array(values) -> np.ndarray:
    """Return a read-only float copy so published arrays cannot be edited in place."""

    array = np.array(values, dtype=float)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, slots=True)
class SectionArrays:
    o2_partial_pressure: np.ndarray
    co2_partial_pressure: np.ndarray
    o2_gain_volume: np.ndarray
    co2_gain_volume: np.ndarray
    crossing_rate_o2: np.ndarray
    crossing_rate_co2: np.ndarray
    residence_time_s: float
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def number_sections(self) -> int:
        return int(len(self.o2_partial_pressure))

    def to_frame(self) -> pd.DataFrame:
        """Per-section table with one row per capillary section."""

        return pd.DataFrame(
            {
                "section": np.arange(self.number_sections),
                "o2_partial_pressure_mmhg": self.o2_partial_pressure,
                "co2_partial_pressure_mmhg": self.co2_partial_pressure,
                "o2_gain_volume_um3": self.o2_gain_volume,
                "co2_gain_volume_um3": self.co2_gain_volume,
                "crossing_rate_o2_per_s": self.crossing_rate_o2,
                "crossing_rate_co2_per_s": self.crossing_rate_co2,
            }
        )


@dataclass(frozen=True, slots=True)
class CapillaryProfile:
    """Pressures and saturations of one completed recompute."""

    sections: SectionArrays
    hb_o2_saturation: np.ndarray

    def to_frame(self) -> pd.DataFrame:
        frame = self.sections.to_frame()
        frame["hb_o2_saturation"] = self.hb_o2_saturation
        return frame


def dissociation_curve_frame(po2: np.ndarray, saturation: np.ndarray) -> pd.DataFrame:
    return pd.DataFrame({"po2_mmhg": po2, "hb_o2_saturation": saturation})
