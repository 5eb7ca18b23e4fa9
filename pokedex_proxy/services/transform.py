import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pokedex_proxy.models import PokemonSummary

logger = logging.getLogger(__name__)


class Shape(str, Enum):
    # {"type": {"name": "grass"}, "slot": 1}
    WRAPPED = "wrapped"
    # {"name": "grass"}
    DIRECT = "direct"


def detect_shape(items: List[Any], wrapper_key: str) -> Optional[Shape]:
    # La forma se decide una vez por lista, mirando el primer elemento
    if not items:
        return None
    first = items[0]
    if not isinstance(first, dict):
        return None
    if isinstance(first.get(wrapper_key), dict):
        return Shape.WRAPPED
    if "name" in first:
        return Shape.DIRECT
    return None


def _name_wrapped(item: Dict[str, Any], wrapper_key: str) -> Optional[str]:
    return (item.get(wrapper_key) or {}).get("name")


def _name_direct(item: Dict[str, Any], wrapper_key: str) -> Optional[str]:
    return item.get("name")


def _stat_wrapped(item: Dict[str, Any], wrapper_key: str) -> Tuple[Optional[str], Any]:
    return (item.get(wrapper_key) or {}).get("name"), item.get("base_stat")


def _stat_direct(item: Dict[str, Any], wrapper_key: str) -> Tuple[Optional[str], Any]:
    return item.get("name"), item.get("base_stat", item.get("value"))


NAME_ADAPTERS: Dict[Shape, Callable[[Dict[str, Any], str], Optional[str]]] = {
    Shape.WRAPPED: _name_wrapped,
    Shape.DIRECT: _name_direct,
}

STAT_ADAPTERS: Dict[Shape, Callable[[Dict[str, Any], str], Tuple[Optional[str], Any]]] = {
    Shape.WRAPPED: _stat_wrapped,
    Shape.DIRECT: _stat_direct,
}


def extract_names(items: List[Any], wrapper_key: str) -> List[str]:
    shape = detect_shape(items, wrapper_key)
    if shape is None:
        if items:
            logger.warning(f"Forma desconocida para '{wrapper_key}', se ignora")
        return []
    adapter = NAME_ADAPTERS[shape]
    names = [adapter(item, wrapper_key) for item in items if isinstance(item, dict)]
    return [name for name in names if name]


def extract_stats(items: List[Any]) -> Dict[str, int]:
    shape = detect_shape(items, "stat")
    if shape is None:
        if items:
            logger.warning("Forma desconocida para 'stats', se ignora")
        return {}
    adapter = STAT_ADAPTERS[shape]
    stats = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        name, value = adapter(item, "stat")
        if name and isinstance(value, int):
            stats[name] = value
    return stats


def format_pokemon_name(name: str) -> str:
    # "mr-mime" -> "Mr Mime"
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def format_pokemon_number(number: Optional[int]) -> str:
    # 25 -> "#025"
    return f"#{str(number or 0).zfill(3)}"


def _pick_sprite(sprites: Dict[str, Any]) -> Optional[str]:
    artwork = (sprites.get("other") or {}).get("official-artwork") or {}
    return artwork.get("front_default") or sprites.get("front_default")


def to_summary(pokemon_data: Dict[str, Any]) -> PokemonSummary:
    name = pokemon_data.get("name") or ""
    pokemon_id = pokemon_data.get("id")

    return PokemonSummary(
        id=pokemon_id,
        name=name,
        display_name=format_pokemon_name(name),
        display_number=format_pokemon_number(pokemon_id),
        sprite=_pick_sprite(pokemon_data.get("sprites") or {}),
        types=extract_names(pokemon_data.get("types") or [], "type"),
        stats=extract_stats(pokemon_data.get("stats") or []),
        abilities=extract_names(pokemon_data.get("abilities") or [], "ability"),
        moves=extract_names(pokemon_data.get("moves") or [], "move"),
    )
