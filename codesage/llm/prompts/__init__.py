"""
Prompt Management Module

Loads the instruction templates for each review intent from text files in
this directory, so prompt wording can change without touching code.

Templates use str.format placeholders; literal JSON braces are doubled.
Values substituted into a template are never re-parsed as placeholders, so
user code containing braces is safe to pass through.
"""

from __future__ import annotations

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        self.prompts_dir = prompts_dir
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Returns:
            Prompt template string

        Raises:
            FileNotFoundError: If no such template exists
        """
        if prompt_name not in self._cache:
            prompt_path = self.prompts_dir / f"{prompt_name}.txt"

            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")

            with open(prompt_path, encoding="utf-8") as f:
                self._cache[prompt_name] = f.read()

        return self._cache[prompt_name]

    def render(self, prompt_name: str, **kwargs: object) -> str:
        """Load a template and inject variables."""
        return self.load_prompt(prompt_name).format(**kwargs)

    def reload(self) -> None:
        """Clear cache and reload prompts from disk"""
        self._cache.clear()
