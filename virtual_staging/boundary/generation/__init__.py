"""Generation provider boundary: contract and fal.ai implementation."""

from virtual_staging.boundary.generation.fal_client import FalGenerationProvider
from virtual_staging.boundary.generation.provider import GenerationProvider, GenerationResult

__all__ = ["FalGenerationProvider", "GenerationProvider", "GenerationResult"]
