from relief_sources.search.base import ResourceSearcher
from relief_sources.search.claude import ClaudeSearcher
from relief_sources.search.directory import DirectorySearcher
from relief_sources.search.perplexity import PerplexitySearcher
from relief_sources.search.places import PlacesSearcher

__all__ = [
    "ClaudeSearcher",
    "DirectorySearcher",
    "PerplexitySearcher",
    "PlacesSearcher",
    "ResourceSearcher",
]
