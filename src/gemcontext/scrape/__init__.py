"""HTML extraction rules for ruby-lang.org, GitHub and bugs.ruby-lang.org pages.

Each page type has its own module with a fixed traversal strategy. The markup
of these sites is not a stable contract, so every rule is a small named
function that can be tested against a fixture on its own.
"""

from gemcontext.scrape.branches import extract_maintenance_status
from gemcontext.scrape.changelog import (
    GEM_CHANGELOG_SELECTORS,
    GITHUB_RELEASE_SELECTORS,
    RUBY_RELEASE_NOTES_SELECTORS,
    clean_changelog_text,
    extract_changelog,
)
from gemcontext.scrape.releases import extract_ruby_releases
from gemcontext.scrape.roadmap import extract_roadmap, extract_roadmap_version

__all__ = [
    "GEM_CHANGELOG_SELECTORS",
    "GITHUB_RELEASE_SELECTORS",
    "RUBY_RELEASE_NOTES_SELECTORS",
    "clean_changelog_text",
    "extract_changelog",
    "extract_maintenance_status",
    "extract_roadmap",
    "extract_roadmap_version",
    "extract_ruby_releases",
]
