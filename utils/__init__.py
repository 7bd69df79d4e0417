# Utilities package for the wiki image mirror
from .filenames import normalize_filename, clean_existing_name, is_degenerate_name
from .constants import CANONICAL_EXT, DEFAULT_STOPWORDS, USER_AGENTS

__all__ = ["normalize_filename", "clean_existing_name", "is_degenerate_name", "CANONICAL_EXT", "DEFAULT_STOPWORDS", "USER_AGENTS"]
