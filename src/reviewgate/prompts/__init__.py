"""Review prompt lookup."""

from reviewgate.prompts.library import InMemoryPromptLibrary, PromptLookup, YamlPromptLibrary

__all__ = ["InMemoryPromptLibrary", "PromptLookup", "YamlPromptLibrary"]
