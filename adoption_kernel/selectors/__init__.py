"""Selectors for the adoption kernel (read side)."""

from adoption_kernel.selectors.adoption_selector import (
    AdoptedPetDTO,
    AdoptionSelector,
    HappyFamilyDTO,
)

__all__ = [
    "AdoptedPetDTO",
    "AdoptionSelector",
    "HappyFamilyDTO",
]
