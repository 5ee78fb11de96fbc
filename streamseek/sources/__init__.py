from .apibay import APIBaySource
from .base import BaseSource
from .eztv import EZTVSource
from .x1337 import X1337Source
from .yts import YTSSource

__all__ = [
    "APIBaySource",
    "BaseSource",
    "EZTVSource",
    "X1337Source",
    "YTSSource",
]
