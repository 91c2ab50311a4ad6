import hashlib
import random
from typing import Optional, Protocol

MOD = 2 ** 32


def make_seed(*parts: str, mod: int = MOD) -> int:
    h = hashlib.sha256("||".join(map(str, parts)).encode()).hexdigest()
    return int(h[:8], 16) % mod


def seed_for_scene(namespace: str, seed: int, scene_number: int) -> int:
    """Per-scene seed, independent of the order scenes are compiled in."""
    return make_seed(namespace, seed, "scene", scene_number)


class RandomSource(Protocol):
    """Anything that can draw a float uniformly from [a, b]."""

    def uniform(self, a: float, b: float) -> float:
        ...


class SeededRandomSource:
    """RandomSource backed by its own `random.Random` instance."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed})"
