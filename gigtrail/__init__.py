"""gigtrail -- has this artist played here, and when?"""

__version__ = "0.1.0"
