"""Tests for the on-page analyzer, SerpApi and PageSpeed clients"""

import httpx
import pytest

from seo_platform.services.pagespeed import basic_audit, parse_lighthouse, run_pagespeed_audit
from seo_platform.services.seo_analyzer import SEOAnalyzerError, analyze_html, analyze_seo
from seo_platform.services.serp_api import fetch_keyword_metrics, infer_search_intent, metrics_from_serp

GOOD_PAGE = """
<html>
<head>
  <title>{title}</title>
  <meta name="description" content="{description}">
  <link rel="canonical" href="https://example.com/guide">
</head>
<body>
  <h1>Complete guide</h1>
  <h2>Part one</h2>
  <img src="a.png" alt="diagram">
  <p>{body}</p>
  <script>var ignored = "these words are not counted";</script>
</body>
</html>
""".format(title="T" * 55, description="D" * 155, body="word " * 700)


def test_well_formed_page_scores_full_marks():
    result = analyze_html("https://example.com/guide", 200, GOOD_PAGE)

    assert result.score == 100
    assert result.issues == []
    assert result.title_length == 55
    assert result.h1_count == 1
    assert result.h2_count == 1
    assert result.word_count == 704


def test_empty_page_penalties():
    result = analyze_html("https://example.com", 200, "<html><body></body></html>")

    categories = {issue.category for issue in result.issues}
    assert categories == {"Title Tag", "Meta Description", "H1 Tag", "Content Length", "Canonical Tag"}
    assert result.score == 100 - 15 - 15 - 10 - 10 - 2


def test_image_penalty_is_capped_and_score_clamped():
    images = '<img src="x.png">' * 8 + '<img src="y.png" alt="">'
    result = analyze_html("https://example.com", 500, f"<html><body><h1>a</h1><h1>b</h1>{images}</body></html>")

    image_issue = next(issue for issue in result.issues if issue.category == "Images")
    assert image_issue.message.startswith("9 image(s)")
    # 30 status + 15 + 15 + 5 + 10 + 10 images (capped) + 2
    assert result.score == 100 - 87


def _page(title_length=55, meta_length=155, words=700, images=""):
    # The H1 contributes one word to the count
    return (
        "<html><head>"
        f"<title>{'T' * title_length}</title>"
        f'<meta name="description" content="{"D" * meta_length}">'
        '<link rel="canonical" href="https://example.com/">'
        f"</head><body><h1>Guide</h1>{images}<p>{'word ' * (words - 1)}</p></body></html>"
    )


@pytest.mark.parametrize("title_length, expected", [
    (29, ("warning", 5)),
    (30, None),
    (70, None),
    (71, ("warning", 5)),
])
def test_title_length_thresholds(title_length, expected):
    result = analyze_html("https://example.com/", 200, _page(title_length=title_length))

    issues = [(issue.type, issue.category) for issue in result.issues]
    if expected is None:
        assert issues == [] and result.score == 100
    else:
        assert issues == [(expected[0], "Title Tag")]
        assert result.score == 100 - expected[1]


@pytest.mark.parametrize("meta_length, expected", [
    (119, ("warning", 3)),
    (120, None),
    (160, None),
    (161, ("info", 2)),
])
def test_meta_description_thresholds(meta_length, expected):
    result = analyze_html("https://example.com/", 200, _page(meta_length=meta_length))

    issues = [(issue.type, issue.category) for issue in result.issues]
    assert result.meta_description_length == meta_length
    if expected is None:
        assert issues == [] and result.score == 100
    else:
        assert issues == [(expected[0], "Meta Description")]
        assert result.score == 100 - expected[1]


@pytest.mark.parametrize("words, expected", [
    (299, ("warning", 10)),
    (300, ("info", 3)),
    (599, ("info", 3)),
    (600, None),
])
def test_word_count_thresholds(words, expected):
    result = analyze_html("https://example.com/", 200, _page(words=words))

    issues = [(issue.type, issue.category) for issue in result.issues]
    assert result.word_count == words
    if expected is None:
        assert issues == [] and result.score == 100
    else:
        assert issues == [(expected[0], "Content Length")]
        assert result.score == 100 - expected[1]


def test_single_image_without_alt():
    result = analyze_html("https://example.com/", 200, _page(images='<img src="a.png" alt="ok"><img src="b.png">'))

    assert [issue.message for issue in result.issues] == ["1 image(s) missing alt attributes. Add descriptive alt text."]
    assert result.score == 98


@pytest.mark.asyncio
async def test_analyze_seo_fetches_page():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=GOOD_PAGE))
    async with httpx.AsyncClient(transport=transport) as client:
        result = await analyze_seo("https://example.com/guide", client=client)

    assert result.status_code == 200
    assert result.score == 100


@pytest.mark.asyncio
async def test_analyze_seo_wraps_network_errors():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SEOAnalyzerError, match="Failed to analyze URL"):
            await analyze_seo("https://unreachable.test", client=client)


def test_search_intent_rules():
    assert infer_search_intent("buy running shoes", {}) == "transactional"
    assert infer_search_intent("how to tie shoes", {}) == "informational"
    assert infer_search_intent("best running shoes", {}) == "commercial"
    assert infer_search_intent("running shoes", {"ads": [{}]}) == "commercial"
    assert infer_search_intent("running shoes", {}) == "informational"


def test_metrics_from_serp():
    data = {
        "ads": [{}, {}],
        "organic_results": [{}] * 10,
        "search_information": {"total_results": 5000000},
    }
    metrics = metrics_from_serp("running shoes", data)

    assert metrics.search_volume == 1000000
    assert metrics.difficulty == 25
    assert metrics.cpc == 1.5
    assert metrics.intent == "commercial"


@pytest.mark.asyncio
async def test_fetch_keyword_metrics_keeps_order_and_nulls_failures():
    def handler(request):
        term = request.url.params["q"]
        if term == "broken":
            return httpx.Response(500)
        return httpx.Response(200, json={"organic_results": [{}] * 4, "search_information": {"total_results": 1200}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        metrics = await fetch_keyword_metrics(["seo tools", "broken", "what is seo"], api_key="serp-key", client=client)

    assert [m.term for m in metrics] == ["seo tools", "broken", "what is seo"]
    assert metrics[0].search_volume == 1200
    assert metrics[0].cpc == 0.5
    assert metrics[1].search_volume is None and metrics[1].difficulty is None
    assert metrics[2].intent == "informational"


@pytest.mark.asyncio
async def test_fetch_keyword_metrics_without_key():
    metrics = await fetch_keyword_metrics(["seo"])

    assert metrics[0].term == "seo"
    assert metrics[0].search_volume is None


LIGHTHOUSE = {
    "lighthouseResult": {
        "categories": {
            "performance": {"score": 0.42},
            "seo": {"score": 0.9},
            "accessibility": {"score": 0.77},
            "best-practices": {"score": 1},
        },
        "audits": {
            "first-contentful-paint": {"score": 0.3},
            "largest-contentful-paint": {"score": 0.8},
            "cumulative-layout-shift": {"score": None},
            "meta-description": {"score": 0},
            "document-title": {"score": 1},
            "speed-index": {"numericValue": 3400},
        },
    }
}


def test_parse_lighthouse():
    result = parse_lighthouse(LIGHTHOUSE)

    assert result.performance_score == 42
    assert result.seo_score == 90
    assert result.accessibility_score == 77
    assert result.best_practices_score == 100
    assert result.mobile_friendly is False
    assert result.load_time == 3
    assert [issue.message for issue in result.issues] == ["Slow First Contentful Paint", "Missing meta description"]


@pytest.mark.asyncio
async def test_pagespeed_without_key_returns_basic_audit():
    result = await run_pagespeed_audit("https://example.com")

    assert result == basic_audit("https://example.com")
    assert result.performance_score == 75


@pytest.mark.asyncio
async def test_pagespeed_error_falls_back():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(429))) as client:
        result = await run_pagespeed_audit("https://example.com", api_key="psi-key", client=client)

    assert result.performance_score == 75


@pytest.mark.asyncio
async def test_pagespeed_requests_all_categories():
    seen = {}

    def handler(request):
        seen["categories"] = request.url.params.get_list("category")
        seen["strategy"] = request.url.params["strategy"]
        return httpx.Response(200, json=LIGHTHOUSE)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await run_pagespeed_audit("https://example.com", api_key="psi-key", client=client)

    assert seen == {"categories": ["performance", "seo", "accessibility", "best-practices"], "strategy": "mobile"}
    assert result.seo_score == 90
