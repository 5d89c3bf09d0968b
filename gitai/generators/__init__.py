"""
Content generators for gitai.

Available generators:
- AIGenerator: Uses OpenAI or Azure OpenAI to write commit messages, PR text, reviews and changelogs
"""

from gitai.generators.ai_generator import AIGenerator
from gitai.generators.base_generator import BaseGenerator

__all__ = [
    'AIGenerator',
    'BaseGenerator',
]
