"""Shared fixtures: canned upstream payloads and a clean subprocess environment."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
import respx

RUBY_RELEASES_HTML = """<!DOCTYPE html>
<html>
<head><title>Ruby Releases</title></head>
<body>
<div id="content">
<h1>Ruby Releases</h1>
<p>This page lists individual Ruby releases.</p>
<table class="release-list">
  <tr><th>Release Version</th><th>Release Date</th><th>Download URL</th><th>Release Notes</th></tr>
  <tr>
    <td>Ruby 3.4.7</td>
    <td>2025-10-07</td>
    <td><a href="https://cache.ruby-lang.org/pub/ruby/3.4/ruby-3.4.7.tar.gz">download</a></td>
    <td><a href="/en/news/2025/10/07/ruby-3-4-7-released/">more...</a></td>
  </tr>
  <tr>
    <td>Ruby 3.5.0-preview1</td>
    <td>2025-04-18</td>
    <td><a href="https://cache.ruby-lang.org/pub/ruby/3.5/ruby-3.5.0-preview1.tar.gz">download</a></td>
    <td><a href="https://www.ruby-lang.org/en/news/2025/04/18/ruby-3-5-0-preview1-released/">more...</a></td>
  </tr>
  <tr>
    <td>Ruby 3.3.9</td>
    <td>2025-07-24</td>
    <td><a href="https://cache.ruby-lang.org/pub/ruby/3.3/ruby-3.3.9.tar.gz">download</a></td>
    <td><a href="/en/news/2025/07/24/ruby-3-3-9-released/">more...</a></td>
  </tr>
  <tr>
    <td>Ruby trunk snapshot</td>
    <td>n/a</td>
    <td></td>
    <td></td>
  </tr>
</table>
</div>
</body>
</html>
"""

RUBY_BRANCHES_HTML = """<!DOCTYPE html>
<html>
<body>
<div id="content">
<h1>Ruby Maintenance Branches</h1>
<p>This page lists the current maintenance status of the various Ruby branches.</p>
<h3>Ruby 3.3</h3>
<p>status: normal maintenance<br>
release date: 2023-12-25<br>
normal maintenance until: 2026-03-31<br>
EOL: 2027-03-31 (expected)</p>
<h3>Ruby 3.5</h3>
<p>status: preview<br>
release date: TBD<br>
normal maintenance until: TBD<br>
EOL: TBD</p>
<h3>Ruby 3.2</h3>
<p>status: security maintenance<br>
release date: 2022-12-25<br>
normal maintenance until: 2025-04-01<br>
EOL: 2026-03-31 (expected)</p>
<h3>Ruby 3.1</h3>
<p>status: eol<br>
release date: 2021-12-25<br>
normal maintenance until: 2024-04-23<br>
EOL: 2025-03-26</p>
</div>
</body>
</html>
"""

RUBY_RELEASE_NOTES_HTML = """<!DOCTYPE html>
<html>
<body>
<nav><a href="/en/">Home</a> <a href="/en/downloads/">Downloads</a></nav>
<div id="content">
<h2>Ruby 3.4.7 Released</h2>
<p>Ruby 3.4.7 has been released. This is a routine update that includes bug fixes.</p>
<p>Please see the GitHub releases for further details.</p>
</div>
<footer>Content available under the terms of its license.</footer>
</body>
</html>
"""

RUBY_EMPTY_NOTES_HTML = """<!DOCTYPE html>
<html>
<body>
<div id="content"><p>TBA</p></div>
<div class="sidebar">Ruby is a dynamic, open source programming language with a focus on simplicity.</div>
</body>
</html>
"""

ROADMAP_HTML = """<!DOCTYPE html>
<html>
<body>
<div id="roadmap">
  <article class="version-article">
    <header>
      <h3 class="icon icon-package"><a href="/versions/123" title="2025-12-25">3.5</a></h3>
    </header>
    <p class="progress-info">42 issues (30 closed - 12 open)</p>
  </article>
  <h3><a href="/versions/456">4.0</a></h3>
  <p>5 issues (5 closed - 0 open)</p>
  <h3><a href="/versions/456">4.0</a></h3>
  <p>5 issues (5 closed - 0 open)</p>
</div>
</body>
</html>
"""

ROADMAP_VERSION_HTML = """<!DOCTYPE html>
<html>
<body>
<h2>3.5</h2>
<div id="roadmap">
  <div class="wiki"><p>Next major release of the Ruby programming language.</p></div>
  <table class="list related-issues">
    <tr class="issue">
      <td class="subject"><a href="/issues/20001">Feature #20001</a>: Add new syntax</td>
      <td class="status">Open</td>
    </tr>
    <tr class="issue">
      <td class="subject"><a href="/issues/20002">Bug #20002</a>: Crash when parsing heredocs</td>
      <td class="status">Closed</td>
    </tr>
    <tr><td></td></tr>
    <tr><td class="subject">Row without an issue link</td></tr>
  </table>
</div>
</body>
</html>
"""


@pytest.fixture(autouse=True)
def _isolate_respx_global_router() -> Iterator[None]:
    """Drop routes left on respx's global router so they cannot leak between tests."""
    respx.mock.routes.clear()
    yield
    respx.mock.routes.clear()


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Environment for server subprocesses, free of the caller's gemcontext settings."""
    env = {key: value for key, value in os.environ.items() if not key.startswith("GEMCONTEXT__")}
    env["GEMCONTEXT__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
def releases_html() -> str:
    return RUBY_RELEASES_HTML


@pytest.fixture()
def branches_html() -> str:
    return RUBY_BRANCHES_HTML


@pytest.fixture()
def release_notes_html() -> str:
    return RUBY_RELEASE_NOTES_HTML


@pytest.fixture()
def empty_release_notes_html() -> str:
    return RUBY_EMPTY_NOTES_HTML


@pytest.fixture()
def roadmap_html() -> str:
    return ROADMAP_HTML


@pytest.fixture()
def roadmap_version_html() -> str:
    return ROADMAP_VERSION_HTML
