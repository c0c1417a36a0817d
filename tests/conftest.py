"""Shared fixtures: a fake requests session serving canned rustdoc pages."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest
import requests

from bevy_docs.lookup import LookupConfig, build_lookup

CRATE = "https://docs.rs/bevy/latest/bevy/"

# docs.rs ships the search page as an empty shell; rows are rendered by JS.
SEARCH_SHELL_HTML = """<!DOCTYPE html>
<html><head><title>bevy - Rust</title></head>
<body><section id="main-content" class="content"></section>
<section id="search" class="content hidden"></section></body></html>
"""

RENDERED_SEARCH_HTML = """<!DOCTYPE html>
<html><head><title>Results for Transform - Rust</title></head>
<body><section id="search" class="content">
<div class="search-results active">
<a class="result-struct" href="https://docs.rs/bevy/latest/bevy/transform/components/struct.Transform.html">bevy::transform::components::Transform</a>
<a class="result-struct" href="../bevy/prelude/struct.Transform.html#method.from_xyz">bevy::prelude::Transform</a>
<a class="result-struct" href="https://docs.rs/bevy/latest/bevy/prelude/struct.Transform.html">bevy::prelude::Transform</a>
<a class="result-struct" href="https://docs.rs/bevy/0.12.0/bevy/prelude/struct.Transform.html">old</a>
<a class="result-struct" href="https://example.com/bevy/latest/struct.Transform.html">elsewhere</a>
<a href="#">top</a>
</div></section></body></html>
"""

ALL_ITEMS_HTML = """<!DOCTYPE html>
<html><head><title>List of all items in this crate</title></head>
<body><section id="main-content" class="content">
<h1>List of all items</h1>
<h3 id="structs">Structs</h3>
<ul class="all-items">
<li><a href="transform/components/struct.Transform.html">transform::components::Transform</a></li>
<li><a href="transform/components/struct.GlobalTransform.html">transform::components::GlobalTransform</a></li>
<li><a href="prelude/struct.Transform.html">prelude::Transform</a></li>
<li><a href="prelude/struct.TransformBundle.html">prelude::TransformBundle</a></li>
<li><a href="sprite/struct.Sprite.html">sprite::Sprite</a></li>
<li><a href="ecs/system/struct.Query.html">ecs::system::Query</a></li>
</ul>
<h3 id="functions">Functions</h3>
<ul class="all-items">
<li><a href="ecs/schedule/common_conditions/fn.resource_exists.html">ecs::schedule::common_conditions::resource_exists</a></li>
</ul>
</section></body></html>
"""

TRANSFORM_HTML = """<!DOCTYPE html>
<html><head><title>Transform in bevy::prelude - Rust</title>
<script>window.rootPath = "../../";</script></head>
<body><section id="main-content" class="content">
<div class="main-heading"><h1>Struct <a href="../index.html">bevy</a>::<a href="index.html">prelude</a>::<a class="struct" href="#">Transform</a><button id="copy-path" title="Copy item path to clipboard">Copy item path</button></h1></div>
<pre class="rust item-decl"><code>pub struct Transform {
    pub translation: <a class="struct" href="#">Vec3</a>,
    pub rotation: <a class="struct" href="#">Quat</a>,
    pub scale: <a class="struct" href="#">Vec3</a>,
}</code></pre>
<details class="toggle top-doc" open><summary class="hideme"><span>Expand description</span></summary>
<div class="docblock"><p>Describe the position of an <a href="#">entity</a>.</p>
<h2 id="examples">Examples</h2>
<div class="example-wrap"><pre class="rust rust-example-rendered"><code>let transform = Transform::from_xyz(1.0, 2.0, 0.0);
assert_eq!(transform.translation.x, 1.0);
</code></pre><div class="button-holder"><button class="copy-button" title="Copy code to clipboard"></button></div></div>
</div></details>
<h2 id="fields" class="fields section-header">Fields</h2>
<div class="docblock"><p>Position of the entity.</p><pre class="rust"><code>let unrelated = 1;</code></pre></div>
</section></body></html>
"""

FN_HTML = """<!DOCTYPE html>
<html><head><title>resource_exists in bevy::ecs - Rust</title></head>
<body><section id="main-content" class="content">
<h1>Function resource_exists</h1>
<h4 class="code-header">pub fn resource_exists&lt;T&gt;(res: Option&lt;Res&lt;'_, T&gt;&gt;) -&gt; bool</h4>
<details class="toggle top-doc" open><div class="docblock">
<p>A system condition that returns <code>true</code> if the resource exists.</p>
</div></details>
</section></body></html>
"""

NO_DECL_HTML = """<!DOCTYPE html>
<html><head><title>Sprite in bevy::sprite - Rust</title></head>
<body><section id="main-content" class="content"><h1>Struct Sprite</h1>
<div class="docblock"><p>Nothing rendered.</p></div></section></body></html>
"""

HTML = "text/html; charset=utf-8"


@dataclass
class FakeResponse:
    url: str
    status_code: int = 200
    content: bytes = b""
    headers: dict[str, str] = field(default_factory=lambda: {"Content-Type": HTML})


class FakeSession:
    """Serves canned pages keyed by URL and records every request."""

    def __init__(self, pages: dict[str, object] | None = None) -> None:
        self.pages: dict[str, object] = dict(pages or {})
        self.headers: dict[str, str] = {}
        self.requested: list[str] = []
        self.closed = False

    def get(self, url: str, timeout=None, headers=None):
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            return FakeResponse(url=url, status_code=404, content=b"<html>404</html>")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, list):
            nxt = page.pop(0)
            if isinstance(nxt, Exception):
                raise nxt
            return nxt
        if isinstance(page, FakeResponse):
            return page
        return FakeResponse(url=url, content=str(page).encode("utf-8"))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def site_pages() -> dict[str, object]:
    return {
        CRATE + "?search=Transform": SEARCH_SHELL_HTML,
        CRATE + "?search=resource_exists": SEARCH_SHELL_HTML,
        CRATE + "?search=Sprite": SEARCH_SHELL_HTML,
        CRATE + "?search=NoSuchThing": SEARCH_SHELL_HTML,
        CRATE + "all.html": ALL_ITEMS_HTML,
        CRATE + "prelude/struct.Transform.html": TRANSFORM_HTML,
        CRATE + "ecs/schedule/common_conditions/fn.resource_exists.html": FN_HTML,
        CRATE + "sprite/struct.Sprite.html": NO_DECL_HTML,
    }


@pytest.fixture
def fake_session(site_pages) -> FakeSession:
    return FakeSession(site_pages)


@pytest.fixture
def lookup(fake_session):
    config = LookupConfig(timeout_s=5, max_retries=1, backoff_base_s=0.0)
    return build_lookup(config, session=fake_session)


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
