"""
Pydantic data models for fitted outlines and pipeline results.

Outlines are a tagged union on the `kind` field, so a serialized result can be
loaded back into the right class and consumers can match on the kind.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class CurveMode(str, Enum):
    """Symbolic representation requested from the curve fitter."""
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    SPLINE = "spline"
    ALL = "all"

    def expand(self):
        """Concrete modes this value stands for."""
        if self is CurveMode.ALL:
            return [CurveMode.LINEAR, CurveMode.QUADRATIC, CurveMode.SPLINE]
        return [self]


class Segment(BaseModel):
    """A straight piece of a linear outline."""
    x1: float
    y1: float
    x2: float
    y2: float
    length: float

    model_config = ConfigDict(extra="forbid")


class QuadTriple(BaseModel):
    """Three points through which a quadratic y = ax^2 + bx + c is solved."""
    x1: float
    y1: float
    x2: float
    y2: float
    x3: float
    y3: float

    model_config = ConfigDict(extra="forbid")

    def points(self):
        return [(self.x1, self.y1), (self.x2, self.y2), (self.x3, self.y3)]


class CubicQuad(BaseModel):
    """Four control points of a cubic Bezier piece."""
    x1: float
    y1: float
    x2: float
    y2: float
    x3: float
    y3: float
    x4: float
    y4: float

    model_config = ConfigDict(extra="forbid")

    def points(self):
        return [(self.x1, self.y1), (self.x2, self.y2), (self.x3, self.y3), (self.x4, self.y4)]


class LinearOutline(BaseModel):
    kind: Literal["linear"] = "linear"
    segments: List[Segment] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def elements(self):
        return self.segments


class QuadraticOutline(BaseModel):
    kind: Literal["quadratic"] = "quadratic"
    curves: List[QuadTriple] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def elements(self):
        return self.curves


class SplineOutline(BaseModel):
    kind: Literal["spline"] = "spline"
    pieces: List[CubicQuad] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def elements(self):
        return self.pieces


Outline = Annotated[
    Union[LinearOutline, QuadraticOutline, SplineOutline],
    Field(discriminator="kind"),
]


class PersonCandidate(BaseModel):
    """A traced contour together with its person-likelihood score."""
    contour: List[Tuple[int, int]]
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    scores: Dict[str, float] = Field(default_factory=dict)
    fallback: bool = False

    model_config = ConfigDict(extra="forbid")


class OutlineOptions(BaseModel):
    """Caller-facing options for outline generation."""
    edge_threshold: int = Field(default=50, ge=1, le=255)
    smoothing: float = Field(default=1.0, gt=0.0)
    curve_mode: CurveMode = CurveMode.LINEAR

    model_config = ConfigDict(extra="forbid")


class OutlineResult(BaseModel):
    """Everything one run produces, in serializable form."""
    width: int
    height: int
    options: OutlineOptions
    preset: str = "default"
    source_path: str = ""
    contour_count: int = 0
    candidates: List[PersonCandidate] = Field(default_factory=list)
    outlines: List[Outline] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
