"""
The Gods of Olympus sample graph.

Twelve vertices and seventeen edges from Roman mythology, the same fixture
JanusGraph ships as the Graph of the Gods.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Vertex labels
TITAN = "titan"
LOCATION = "location"
GOD = "god"
DEMIGOD = "demigod"
HUMAN = "human"
MONSTER = "monster"

# Edge labels
FATHER = "father"
MOTHER = "mother"
LIVES = "lives"
PET = "pet"
BROTHER = "brother"
BATTLED = "battled"

# Property keys
NAME = "name"
AGE = "age"
TIME = "time"
REASON = "reason"
PLACE = "place"
TIMESTAMP = "ts"

# Marks a loaded dataset
SENTINEL_NAME = "saturn"


@dataclass(frozen=True)
class VertexSpec:
    label: str
    name: str
    age: Optional[int] = None

    def properties(self) -> dict[str, Any]:
        props: dict[str, Any] = {NAME: self.name}
        if self.age is not None:
            props[AGE] = self.age
        return props


@dataclass(frozen=True)
class EdgeSpec:
    """An edge between two vertices named ``out_name`` and ``in_name``."""

    out_name: str
    label: str
    in_name: str
    properties: dict[str, Any] = field(default_factory=dict)
    # (lat, lon) of a battle
    place: Optional[tuple[float, float]] = None


VERTICES: tuple[VertexSpec, ...] = (
    VertexSpec(TITAN, "saturn", 10000),
    VertexSpec(LOCATION, "sky"),
    VertexSpec(LOCATION, "sea"),
    VertexSpec(GOD, "jupiter", 5000),
    VertexSpec(GOD, "neptune", 4500),
    VertexSpec(DEMIGOD, "hercules", 30),
    VertexSpec(HUMAN, "alcmene", 45),
    VertexSpec(GOD, "pluto", 4000),
    VertexSpec(MONSTER, "nemean"),
    VertexSpec(MONSTER, "hydra"),
    VertexSpec(MONSTER, "cerberus"),
    VertexSpec(LOCATION, "tartarus"),
)

EDGES: tuple[EdgeSpec, ...] = (
    EdgeSpec("jupiter", FATHER, "saturn"),
    EdgeSpec("jupiter", LIVES, "sky", {REASON: "loves fresh breezes"}),
    EdgeSpec("jupiter", BROTHER, "neptune"),
    EdgeSpec("jupiter", BROTHER, "pluto"),

    EdgeSpec("neptune", LIVES, "sea", {REASON: "loves waves"}),
    EdgeSpec("neptune", BROTHER, "jupiter"),
    EdgeSpec("neptune", BROTHER, "pluto"),

    EdgeSpec("hercules", FATHER, "jupiter"),
    EdgeSpec("hercules", MOTHER, "alcmene"),
    EdgeSpec("hercules", BATTLED, "nemean", {TIME: 1}, place=(38.1, 23.7)),
    EdgeSpec("hercules", BATTLED, "hydra", {TIME: 2}, place=(37.7, 23.9)),
    EdgeSpec("hercules", BATTLED, "cerberus", {TIME: 12}, place=(39.0, 22.0)),

    EdgeSpec("pluto", BROTHER, "jupiter"),
    EdgeSpec("pluto", BROTHER, "neptune"),
    EdgeSpec("pluto", LIVES, "tartarus", {REASON: "no fear of death"}),
    EdgeSpec("pluto", PET, "cerberus"),

    EdgeSpec("cerberus", LIVES, "tartarus"),
)
