"""Package resolution with interactive fallback for Arch Linux post-install setup"""

__version__ = "1.0.0"
