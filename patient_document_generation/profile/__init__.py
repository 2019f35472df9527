"""
Profile Layer - Patient Profile Normalization

Submodules:
    normalizer.py → Loose caller input → canonical PatientProfile

Dependency Rule:
    This layer depends on: core
    This layer is used by: pipeline, generation (section regeneration)
"""

from patient_document_generation.profile.normalizer import ProfileNormalizer, normalize_profile

__all__ = [
    "ProfileNormalizer",
    "normalize_profile",
]
