from __future__ import annotations
from dataclasses import dataclass
import os
import sys
from pathlib import Path
from typing import Mapping

from purehr.core.constants import DEFAULT_GROUP_SIZE, DEFAULT_ROOM_STYLE
from purehr.domain.models import RoomStyle

@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    group_size: int = DEFAULT_GROUP_SIZE
    room_style: RoomStyle = RoomStyle(DEFAULT_ROOM_STYLE)

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"


def get_run_root() -> Path:
    """Retourne le dossier contenant l'exécutable ou le projet en développement.

    Les logs doivent atterrir dans une zone d'écriture stable, quel que soit
    le répertoire courant au lancement.
    """

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent

    return Path(__file__).resolve().parent.parent.parent


def parse_group_size(value) -> int:
    """Valide une taille de groupe venant de l'extérieur (env, UI)."""
    try:
        size = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Taille de groupe invalide : {value!r}") from None
    if size < 1:
        raise ValueError(f"La taille de groupe doit être positive (reçu {size}).")
    return size


def load_config(env: Mapping[str, str] | None = None, data_dir: Path | None = None) -> AppConfig:
    env = os.environ if env is None else env
    data_dir = data_dir or (get_run_root() / "data")
    data_dir.mkdir(parents=True, exist_ok=True)

    group_size = DEFAULT_GROUP_SIZE
    raw_size = env.get("PUREHR_GROUP_SIZE")
    if raw_size:
        group_size = parse_group_size(raw_size)

    # un style inconnu est rejeté ici, le cœur ne voit que l'énumération
    room_style = RoomStyle.parse(env.get("PUREHR_ROOM_STYLE") or DEFAULT_ROOM_STYLE)

    return AppConfig(data_dir=data_dir, group_size=group_size, room_style=room_style)
