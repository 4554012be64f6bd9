"""Integration tests for projects and the research tools that hang off them"""

import pytest
from uuid import UUID

from seo_platform.api.api_v1.endpoints import content_briefs as content_briefs_endpoint
from seo_platform.api.api_v1.endpoints import documents as documents_endpoint
from seo_platform.api.api_v1.endpoints import keywords as keywords_endpoint
from seo_platform.core.config import settings
from seo_platform.models.content_brief import ContentBrief
from seo_platform.models.telemetry import TelemetryEvent
from seo_platform.services import site_audit
from seo_platform.services.content_ai import ContentBriefData, OutlineSection
from seo_platform.services.llm import LLMResponse, LLMUsage
from seo_platform.services.pagespeed import PageSpeedResult
from seo_platform.services.seo_analyzer import SEOAnalysisResult, SEOAnalyzerError, SEOIssue
from seo_platform.services.serp_api import KeywordMetrics

API = "/api/v1"


@pytest.fixture
def project(client, owner_headers):
    response = client.post(f"{API}/projects/", json={"name": "Marketing site", "domain": "https://example.com"},
                           headers=owner_headers)
    assert response.status_code == 201
    return response.json()["project"]


class TestProjects:

    def test_create_without_domain_stores_null(self, client, owner_headers):
        response = client.post(f"{API}/projects/", json={"name": "  Blog  ", "domain": ""}, headers=owner_headers)

        assert response.status_code == 201
        project = response.json()["project"]
        assert project["name"] == "Blog"
        assert project["domain"] is None

    def test_invalid_domain(self, client, owner_headers):
        response = client.post(f"{API}/projects/", json={"name": "Blog", "domain": "example"}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request data"

    def test_free_plan_project_limit(self, client, owner_headers):
        for name in ("One", "Two"):
            assert client.post(f"{API}/projects/", json={"name": name}, headers=owner_headers).status_code == 201

        response = client.post(f"{API}/projects/", json={"name": "Three"}, headers=owner_headers)

        assert response.status_code == 403
        body = response.json()
        assert "detail" not in body
        assert (body["current"], body["limit"]) == (2, 2)
        assert "Upgrade" in body["error"]

    def test_pro_plan_raises_the_limit(self, client, owner_headers, set_plan):
        set_plan("owner@example.com", "PRO")

        for i in range(3):
            assert client.post(f"{API}/projects/", json={"name": f"P{i}"}, headers=owner_headers).status_code == 201

    def test_list_and_detail(self, client, owner_headers, project):
        listed = client.get(f"{API}/projects/", headers=owner_headers).json()["projects"]
        detail = client.get(f"{API}/projects/{project['id']}", headers=owner_headers).json()["project"]

        assert [p["id"] for p in listed] == [project["id"]]
        assert listed[0]["_count"] == {"keywords": 0, "audits": 0, "content_briefs": 0}
        assert detail["keywords"] == [] and detail["audits"] == []

    def test_update_and_delete(self, client, owner_headers, project, db):
        updated = client.patch(f"{API}/projects/{project['id']}", json={"name": "Renamed", "domain": ""},
                               headers=owner_headers)
        assert updated.json()["project"]["name"] == "Renamed"
        assert updated.json()["project"]["domain"] is None

        assert client.delete(f"{API}/projects/{project['id']}", headers=owner_headers).json() == {"success": True}
        assert client.get(f"{API}/projects/{project['id']}", headers=owner_headers).status_code == 404

        types = {event.type for event in db.query(TelemetryEvent) if event.type.startswith("PROJECT_")}
        assert types == {"PROJECT_CREATED", "PROJECT_UPDATED", "PROJECT_DELETED"}

    def test_projects_are_workspace_scoped(self, client, register, project):
        other = register("other@example.com")

        assert client.get(f"{API}/projects/{project['id']}", headers=other).status_code == 404
        assert client.get(f"{API}/projects/", headers=other).json()["projects"] == []

    def test_malformed_id(self, client, owner_headers):
        assert client.get(f"{API}/projects/not-a-uuid", headers=owner_headers).status_code == 400

    def test_unknown_client_link(self, client, owner_headers):
        response = client.post(f"{API}/projects/", json={
            "name": "Linked",
            "client_id": "00000000-0000-0000-0000-000000000000",
        }, headers=owner_headers)

        assert response.status_code == 404


class TestKeywords:

    @pytest.fixture
    def fake_serp(self, monkeypatch):
        calls = []

        async def fake_fetch(terms, api_key=None, client=None):
            calls.append((terms, api_key))
            return [KeywordMetrics(term=t, search_volume=100 * (i + 1), difficulty=20, cpc=0.5, intent="informational")
                    for i, t in enumerate(terms)]

        monkeypatch.setattr(keywords_endpoint, "fetch_keyword_metrics", fake_fetch)
        return calls

    def test_requires_serp_key(self, client, owner_headers, project):
        response = client.post(f"{API}/keywords/", json={"project_id": project["id"], "terms": ["seo"]},
                               headers=owner_headers)

        assert response.status_code == 400
        assert "SERP API not configured" in response.json()["detail"]

    def test_stores_metrics(self, client, owner_headers, project, fake_serp, monkeypatch):
        monkeypatch.setattr(settings, "SERP_API_KEY", "serp-platform")

        response = client.post(f"{API}/keywords/", json={
            "project_id": project["id"],
            "terms": [" seo audit ", "keyword research tool"],
        }, headers=owner_headers)

        assert response.status_code == 201
        keywords = response.json()["keywords"]
        assert [k["term"] for k in keywords] == ["seo audit", "keyword research tool"]
        assert keywords[1]["volume"] == 200
        assert keywords[1]["is_long_tail"] is True
        assert fake_serp == [(["seo audit", "keyword research tool"], "serp-platform")]

        listed = client.get(f"{API}/keywords/", params={"project_id": project["id"]}, headers=owner_headers)
        assert len(listed.json()["keywords"]) == 2

    def test_batch_over_plan_limit(self, client, owner_headers, project, fake_serp, monkeypatch):
        monkeypatch.setattr(settings, "SERP_API_KEY", "serp-platform")

        response = client.post(f"{API}/keywords/", json={
            "project_id": project["id"],
            "terms": [f"term {i}" for i in range(11)],
        }, headers=owner_headers)

        assert response.status_code == 403
        assert response.json()["current"] == 0
        assert response.json()["limit"] == 10
        assert fake_serp == []

    def test_term_validation(self, client, owner_headers, project):
        response = client.post(f"{API}/keywords/", json={"project_id": project["id"], "terms": []},
                               headers=owner_headers)

        assert response.status_code == 400

    def test_delete(self, client, owner_headers, project, fake_serp, monkeypatch):
        monkeypatch.setattr(settings, "SERP_API_KEY", "serp-platform")
        keyword = client.post(f"{API}/keywords/", json={"project_id": project["id"], "terms": ["seo"]},
                              headers=owner_headers).json()["keywords"][0]

        assert client.delete(f"{API}/keywords/{keyword['id']}", headers=owner_headers).status_code == 200
        assert client.delete(f"{API}/keywords/{keyword['id']}", headers=owner_headers).status_code == 404


class TestAudits:

    @pytest.fixture
    def fake_audit(self, monkeypatch):
        async def fake_analyze(url, client=None):
            return SEOAnalysisResult(
                url=url,
                status_code=200,
                title="Example title",
                h1_count=1,
                word_count=420,
                issues=[SEOIssue(type="info", category="Canonical Tag", message="No canonical tag found.")],
                score=80,
            )

        async def fake_pagespeed(url, api_key=None, client=None):
            return PageSpeedResult(
                performance_score=60,
                seo_score=90,
                accessibility_score=85,
                best_practices_score=95,
                mobile_friendly=True,
                load_time=2,
                issues=[SEOIssue(type="warning", category="Performance", message="Slow First Contentful Paint")],
            )

        monkeypatch.setattr(site_audit, "analyze_seo", fake_analyze)
        monkeypatch.setattr(site_audit, "run_pagespeed_audit", fake_pagespeed)

    def test_run_audit(self, client, owner_headers, project, fake_audit):
        response = client.post(f"{API}/audits/", json={"project_id": project["id"], "url": "https://example.com/"},
                               headers=owner_headers)

        assert response.status_code == 201
        audit = response.json()["audit"]
        assert audit["overall_score"] == 70
        assert audit["performance_score"] == 60
        assert [issue["category"] for issue in audit["issues"]] == ["Canonical Tag", "Performance"]
        # No OpenAI key: one fallback recommendation per analyzer issue
        assert audit["recommendations"] == ["Fix: No canonical tag found."]

        fetched = client.get(f"{API}/audits/{audit['id']}", headers=owner_headers)
        assert fetched.json()["audit"]["url"] == "https://example.com/"

    def test_weekly_limit(self, client, owner_headers, project, fake_audit):
        payload = {"project_id": project["id"], "url": "https://example.com/"}
        for _ in range(3):
            assert client.post(f"{API}/audits/", json=payload, headers=owner_headers).status_code == 201

        response = client.post(f"{API}/audits/", json=payload, headers=owner_headers)

        assert response.status_code == 403
        assert response.json()["limit"] == 3

    def test_unreachable_url(self, client, owner_headers, project, monkeypatch, db):
        async def failing(url, client=None):
            raise SEOAnalyzerError("Failed to analyze URL: connection refused")

        monkeypatch.setattr(site_audit, "analyze_seo", failing)

        response = client.post(f"{API}/audits/", json={"project_id": project["id"], "url": "https://down.test/"},
                               headers=owner_headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to analyze URL: connection refused"
        error = db.query(TelemetryEvent).filter(TelemetryEvent.type == "ERROR_OCCURRED").one()
        assert error.event_metadata["errorType"] == "SEOAnalyzerError"

    def test_url_required(self, client, owner_headers, project):
        response = client.post(f"{API}/audits/", json={"project_id": project["id"]}, headers=owner_headers)

        assert response.status_code == 400


class TestContentBriefs:

    def test_without_openai_key(self, client, owner_headers, project):
        response = client.post(f"{API}/content-briefs/", json={"project_id": project["id"], "target_keyword": "seo"},
                               headers=owner_headers)

        assert response.status_code == 400
        assert "OpenAI API not configured" in response.json()["detail"]

    def test_generate_and_store(self, client, owner_headers, project, monkeypatch):
        async def fake_generate(**kwargs):
            assert kwargs["model"] == "gpt-4o-mini"
            return ContentBriefData(
                title="What Is SEO?",
                metaDescription="A primer.",
                h1="SEO explained",
                outline=[OutlineSection(heading="Basics")],
                talkingPoints=["Search engines crawl pages"],
                targetWordCount=1200,
                keywords=["seo"],
            )

        monkeypatch.setattr(content_briefs_endpoint, "generate_content_brief", fake_generate)

        response = client.post(f"{API}/content-briefs/", json={"project_id": project["id"], "target_keyword": "what is seo"},
                               headers=owner_headers)

        assert response.status_code == 201
        brief = response.json()["brief"]
        assert brief["h1"] == "SEO explained"
        assert brief["questions"] == ["Search engines crawl pages"]
        assert brief["word_count_target"] == 1200
        assert brief["search_intent"] == "informational"

        briefs = client.get(f"{API}/content-briefs/", headers=owner_headers).json()["briefs"]
        assert [b["id"] for b in briefs] == [brief["id"]]

    def test_per_project_limit(self, client, owner_headers, project, db):
        for i in range(3):
            db.add(ContentBrief(project_id=UUID(project["id"]), target_keyword=f"kw {i}"))
        db.commit()

        response = client.post(f"{API}/content-briefs/", json={"project_id": project["id"], "target_keyword": "one more"},
                               headers=owner_headers)

        assert response.status_code == 403
        assert response.json() == {
            "error": "You've reached your content briefs per project limit of 3. Upgrade your plan to create more.",
            "current": 3,
            "limit": 3,
        }


class TestDocumentsAndClients:

    def test_document_crud(self, client, owner_headers, project):
        created = client.post(f"{API}/documents/", json={
            "title": "Q3 strategy",
            "type": "STRATEGY",
            "content": "Grow organic traffic",
            "project_id": project["id"],
        }, headers=owner_headers)
        assert created.status_code == 201
        document = created.json()["document"]

        updated = client.patch(f"{API}/documents/{document['id']}", json={"title": "Q4 strategy"}, headers=owner_headers)
        assert updated.json()["document"]["title"] == "Q4 strategy"
        assert updated.json()["document"]["project_id"] == project["id"]

        listed = client.get(f"{API}/documents/", params={"project_id": project["id"]}, headers=owner_headers)
        assert len(listed.json()["documents"]) == 1

        assert client.delete(f"{API}/documents/{document['id']}", headers=owner_headers).status_code == 200

    def test_generate_unknown_template(self, client, owner_headers):
        response = client.post(f"{API}/documents/generate", json={"template": "poem", "workspace_name": "Acme"},
                               headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid template type"

    def test_generate_template(self, client, owner_headers, monkeypatch):
        async def fake_generate_text(db, workspace_id, options, profile, provider):
            assert "Acme" in options.prompt
            return LLMResponse(content="# Privacy Policy", usage=LLMUsage(), provider="openai", model="gpt-4o")

        monkeypatch.setattr(documents_endpoint, "generate_text", fake_generate_text)

        response = client.post(f"{API}/documents/generate", json={
            "template": "privacy-policy",
            "workspace_name": "Acme",
            "domain": "acme.test",
        }, headers=owner_headers)

        assert response.status_code == 200
        assert response.json() == {
            "title": "Privacy Policy",
            "content": "# Privacy Policy",
            "provider": "openai",
            "model": "gpt-4o",
        }

    def test_generate_without_llm_key(self, client, owner_headers):
        response = client.post(f"{API}/documents/generate", json={"template": "terms", "workspace_name": "Acme"},
                               headers=owner_headers)

        assert response.status_code == 400

    def test_client_stats(self, client, owner_headers, project, monkeypatch):
        created = client.post(f"{API}/clients/", json={"name": "Acme Corp", "contact_email": ""}, headers=owner_headers)
        assert created.status_code == 201
        acme = created.json()["client"]
        assert acme["contact_email"] is None

        client.patch(f"{API}/projects/{project['id']}", json={"client_id": acme["id"]}, headers=owner_headers)

        detail = client.get(f"{API}/clients/{acme['id']}", headers=owner_headers).json()
        assert [p["id"] for p in detail["client"]["projects"]] == [project["id"]]
        assert detail["stats"] == {"total_keywords": 0, "total_audits": 0, "total_content_briefs": 0}
