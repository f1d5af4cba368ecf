"""Static parameter tables: species, age modifiers and crown styles."""

from .species import (
    SpeciesPreset,
    AgeModifier,
    SPECIES_PRESETS,
    AGE_MODIFIERS,
    DEFAULT_SPECIES,
    DEFAULT_AGE,
    get_species,
    get_age,
    list_species,
    list_ages,
)
from .styles import (
    TreeStyle,
    TREE_STYLES,
    CROWN_STYLES,
    DEFAULT_TREE_STYLE,
    get_tree_style,
    list_tree_styles,
)

__all__ = [
    "SpeciesPreset",
    "AgeModifier",
    "SPECIES_PRESETS",
    "AGE_MODIFIERS",
    "DEFAULT_SPECIES",
    "DEFAULT_AGE",
    "get_species",
    "get_age",
    "list_species",
    "list_ages",
    "TreeStyle",
    "TREE_STYLES",
    "CROWN_STYLES",
    "DEFAULT_TREE_STYLE",
    "get_tree_style",
    "list_tree_styles",
]
