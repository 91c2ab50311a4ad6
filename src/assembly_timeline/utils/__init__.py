from .config import Config
from .logger import LoggerMixin, setup_logging
from .seed import RandomSource, SeededRandomSource, make_seed, seed_for_scene

__all__ = [
    'Config',
    'LoggerMixin',
    'setup_logging',
    'RandomSource',
    'SeededRandomSource',
    'make_seed',
    'seed_for_scene',
]
