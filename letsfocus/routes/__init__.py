"""
LetsFocus Route Blueprints
Modular Flask blueprints for the control API.
"""

from .health import health_bp
from .main import main_bp
from .music import music_bp
from .timer import timer_bp

__all__ = [
    "health_bp",
    "main_bp",
    "music_bp",
    "timer_bp",
]
