from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from purehr.core.constants import DEFAULT_REGION

# --- Entités de base (in-memory)

@dataclass
class Person:
    id: str
    name: str
    department: Optional[str] = None
    attended: bool = False
    check_in_time: Optional[datetime] = None
    region: Optional[str] = None

@dataclass
class Group:
    id: int
    name: str
    # ordre d'insertion, pas ordre de placement
    members: List[Person] = field(default_factory=list)


def group_name(index: int) -> str:
    """Nom affiché du groupe ``index`` (1-based)."""
    return f"第 {index} 組"


class RoomStyle(str, Enum):
    CLUSTER = "cluster"
    CLASSROOM = "classroom"
    U_SHAPE = "u-shape"
    HOLLOW = "hollow"
    THEATER = "theater"

    @classmethod
    def parse(cls, value) -> "RoomStyle":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower().replace("_", "-")
        for style in cls:
            if style.value == text:
                return style
        raise ValueError(f"Style de salle inconnu : {value!r}")

    @property
    def has_stage(self) -> bool:
        return self in (RoomStyle.CLASSROOM, RoomStyle.U_SHAPE, RoomStyle.THEATER)


@dataclass(frozen=True)
class Zone:
    group_id: int
    x: float
    y: float
    width: float
    height: float
    color: str

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains(self, px: float, py: float) -> bool:
        # bornes inclusives
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    def overlap_area(self, other: "Zone") -> float:
        w = min(self.x + self.width, other.x + other.width) - max(self.x, other.x)
        h = min(self.y + self.height, other.y + other.height) - max(self.y, other.y)
        return w * h if w > 0 and h > 0 else 0.0


@dataclass
class Token:
    """Nœud de simulation : représentant visuel d'une personne."""
    id: str
    group_id: int
    name: str
    radius: float
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


@dataclass(frozen=True)
class RoomInfo:
    name: str
    description: str
    capacity: str
    scenario: str
    pros: str
    cons: str


ROOM_INFOS: Dict[RoomStyle, RoomInfo] = {
    RoomStyle.CLUSTER: RoomInfo(
        name="Îlots de discussion",
        description="Les participants s'assoient autour de tables par petit groupe.",
        capacity="Tous effectifs",
        scenario="Ateliers, brainstorming, compétitions par équipe",
        pros="Très bonne interaction et cohésion d'équipe",
        cons="Certains doivent se retourner pour voir l'intervenant",
    ),
    RoomStyle.CLASSROOM: RoomInfo(
        name="Salle de classe",
        description="Rangées de tables face à l'estrade, chacun a un bureau.",
        capacity="Moyen à grand (20 personnes et plus)",
        scenario="Cours magistraux, prise de notes, ordinateurs portables",
        pros="Meilleure occupation de l'espace, vue homogène",
        cons="Peu d'interaction, les derniers rangs sont éloignés",
    ),
    RoomStyle.U_SHAPE: RoomInfo(
        name="En U",
        description="Tables disposées en « U », ouverture vers l'intervenant.",
        capacity="Petit (15 à 25 personnes)",
        scenario="Démonstrations, intervenant qui circule souvent",
        pros="Bon contact visuel, l'intervenant voit tout le monde",
        cons="Très gourmand en place, inadapté aux grands effectifs",
    ),
    RoomStyle.HOLLOW: RoomInfo(
        name="Carré vide",
        description="Tables en carré ou rectangle fermé, centre laissé libre.",
        capacity="Petit à moyen (12 à 30 personnes)",
        scenario="Comités de direction, tables rondes",
        pros="Ambiance d'égalité, propice aux échanges approfondis",
        cons="L'intervenant a du mal à « tenir » la salle",
    ),
    RoomStyle.THEATER: RoomInfo(
        name="Théâtre",
        description="Uniquement des chaises, alignées en rangées.",
        capacity="Très grand (50 personnes et plus)",
        scenario="Conférences courtes, lancements produit",
        pros="Capacité d'accueil maximale",
        cons="Le public reste entièrement passif",
    ),
}

# --- Roster simple (remplace une BD : rien n'est persisté entre deux sessions)

class Roster:
    def __init__(self, people: Iterable[Person] = ()) -> None:
        self._person_seq = 1
        self._people: List[Person] = []
        self.extend(people)

    @property
    def people(self) -> List[Person]:
        return list(self._people)

    def __len__(self) -> int:
        return len(self._people)

    def __iter__(self):
        return iter(list(self._people))

    def next_id(self) -> str:
        pid = f"p-{self._person_seq}"
        self._person_seq += 1
        return pid

    # CRUD (UI / import)
    def add_person(self, name: str, department: Optional[str] = None) -> Person:
        name = (name or "").strip()
        if not name:
            raise ValueError("Le nom est obligatoire")
        dept = department.strip() if department else None
        p = Person(id=self.next_id(), name=name, department=dept or None)
        self._people.append(p)
        return p

    def extend(self, people: Iterable[Person]) -> int:
        known = {p.id for p in self._people}
        added = 0
        for p in people:
            if p.id in known:
                # id déjà pris : on en attribue un nouveau
                p = Person(
                    id=self.next_id(), name=p.name, department=p.department,
                    attended=p.attended, check_in_time=p.check_in_time, region=p.region,
                )
            known.add(p.id)
            self._people.append(p)
            added += 1
        return added

    def update_person(self, pid: str, **fields) -> None:
        for p in self._people:
            if p.id == pid:
                for k, v in fields.items():
                    setattr(p, k, v)
                return

    def remove_person(self, pid: str) -> None:
        self._people = [p for p in self._people if p.id != pid]

    def clear(self) -> None:
        self._people = []

    def find_by_name(self, name: str) -> List[Person]:
        wanted = (name or "").strip()
        return [p for p in self._people if p.name.strip() == wanted]

    # Présences
    def check_in(self, name: str, region: str = DEFAULT_REGION, when: Optional[datetime] = None) -> Optional[Person]:
        matches = self.find_by_name(name)
        if not matches:
            return None
        self._mark(matches, region, when)
        return matches[0]

    def check_in_ids(self, ids: Iterable[str], region: str = DEFAULT_REGION, when: Optional[datetime] = None) -> int:
        """Pointe exactement les personnes sélectionnées, homonymes exclus."""
        wanted = set(ids)
        selected = [p for p in self._people if p.id in wanted]
        self._mark(selected, region, when)
        return len(selected)

    def _mark(self, people: List[Person], region: str, when: Optional[datetime]) -> None:
        when = when or datetime.now()
        for p in people:
            p.attended = True
            p.check_in_time = when
            p.region = region

    def attended(self) -> List[Person]:
        return [p for p in self._people if p.attended]

    def attendance_counts(self) -> tuple[int, int]:
        return len(self.attended()), len(self._people)

    def counts_by_region(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for p in self.attended():
            key = p.region or DEFAULT_REGION
            counts[key] = counts.get(key, 0) + 1
        return counts
