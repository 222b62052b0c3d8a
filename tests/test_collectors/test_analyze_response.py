"""Tests for brand/competitor detection in answer text."""

from ai_visibility.collectors.llm_base import (
    BaseLlmClient,
    Locale,
    ResponseAnalysis,
    analyze_response,
    brand_variations,
    merge_native_citations,
    normalize_competitors,
    normalize_domain,
)


class TestNormalizeDomain:
    def test_strips_scheme_www_and_slash(self):
        assert normalize_domain("https://www.Acme.com/") == "acme.com"

    def test_plain_domain_unchanged(self):
        assert normalize_domain("acme.com") == "acme.com"

    def test_variations(self):
        assert brand_variations("my-brand.io") == ["my-brand", "my brand", "my-brand.io"]

    def test_competitors_deduplicated_after_normalising(self):
        raw = ["rival.com", "https://www.Rival.com/", "acme.com", "", "other.io", "rival.com"]
        assert normalize_competitors(raw, "acme.com") == ["rival.com", "other.io"]


class TestAnalyzeResponse:
    def test_brand_and_competitor_positions(self):
        text = "Top picks:\n\n1. Rival offers X\n2. Acme (https://acme.com/pricing)."
        result = analyze_response(text, "acme.com", ["rival.com"])
        assert result.brand_mentioned is True
        assert result.url_cited is True
        assert result.cited_url == "https://acme.com/pricing"
        assert result.citation_position == 3
        assert len(result.competitor_mentions) == 1
        rival = result.competitor_mentions[0]
        assert rival.domain == "rival.com"
        assert rival.mentioned is True
        assert rival.position == 2

    def test_hyphenated_brand_as_words(self):
        result = analyze_response("I recommend My Brand for this.", "my-brand.io", [])
        assert result.brand_mentioned is True
        assert result.url_cited is False
        assert result.citation_position == 1

    def test_trailing_punctuation_stripped_from_cited_url(self):
        result = analyze_response("Visit https://acme.com.", "acme.com", [])
        assert result.cited_url == "https://acme.com"

    def test_bare_domain_counts_as_citation_without_url(self):
        result = analyze_response("See acme.com for details", "acme.com", [])
        assert result.url_cited is True
        assert result.cited_url is None

    def test_not_mentioned(self):
        result = analyze_response("Nothing relevant here.", "acme.com", ["rival.com"])
        assert result.brand_mentioned is False
        assert result.url_cited is False
        assert result.citation_position is None
        assert result.competitor_mentions[0].mentioned is False
        assert result.competitor_mentions[0].position is None

    def test_case_insensitive(self):
        assert analyze_response("ACME is great", "acme.com", []).brand_mentioned is True


class TestNativeCitations:
    def test_merges_target_domain(self):
        analysis = ResponseAnalysis(brand_mentioned=True)
        merge_native_citations(analysis, ["https://other.com/a", "https://www.acme.com/docs"], "acme.com")
        assert analysis.url_cited is True
        assert analysis.cited_url == "https://www.acme.com/docs"

    def test_keeps_text_citation(self):
        analysis = ResponseAnalysis(url_cited=True, cited_url="https://acme.com/pricing")
        merge_native_citations(analysis, ["https://acme.com/other"], "acme.com")
        assert analysis.cited_url == "https://acme.com/pricing"

    def test_ignores_other_domains(self):
        analysis = ResponseAnalysis()
        merge_native_citations(analysis, ["https://rival.com"], "acme.com")
        assert analysis.url_cited is False


class TestBuildPrompt:
    def test_without_locale(self):
        assert BaseLlmClient.build_prompt("best tool") == "best tool"

    def test_with_locale(self):
        prompt = BaseLlmClient.build_prompt("best tool", Locale(region="de", language="de"))
        assert prompt.startswith("best tool")
        assert "region 'de'" in prompt
