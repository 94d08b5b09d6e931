"""Tests for article projection and rendering."""

from feature_app.data.articles import (
    format_date,
    project_articles,
    render_article_html,
    render_placeholder_html,
    source_domain,
    summarize,
)
from feature_app.data.models import Article, SeriesKind
from feature_app.data.normalizer import SeriesNormalizer


class TestArticleProjection:
    """Raw article feed to Article tuples."""

    def test_wrapped_articles(self, articles_payload):
        """An object with an articles array is unwrapped."""
        articles = SeriesNormalizer().normalize_articles(articles_payload)

        assert len(articles) == 3
        first, second, third = articles
        assert first.title == "First"
        assert first.date == "2024-03-01"
        assert first.score == 0.876
        assert first.lede == "First lede."
        assert second.title == "Second headline"
        assert second.score is None
        assert third.url == "#"
        assert third.score is None
        assert third.lede == "Third summary."

    def test_bare_array_and_object_values(self):
        """Arrays are used directly; other objects contribute their values."""
        item = {"title": "x"}

        assert len(project_articles([item, "skip", 3])) == 1
        assert len(project_articles({"a": item, "b": item, "c": "text"})) == 2

    def test_untitled_fallback(self):
        """Missing title and headline render as Untitled."""
        assert project_articles([{}])[0].title == "Untitled"

    def test_articles_not_sniffed_without_hint(self):
        """Article feeds are only decoded when the caller asks for them."""
        result = SeriesNormalizer().normalize_with_result([{"title": "x"}])
        assert result.kind != SeriesKind.ARTICLES


class TestFormatting:
    """Date, domain and summary helpers."""

    def test_format_date(self):
        """An ISO date is kept, otherwise the first 10 characters."""
        assert format_date("published 2024-01-05 08:00") == "2024-01-05"
        assert format_date("March 5th, 2024") == "March 5th,"
        assert format_date(None) == ""

    def test_source_domain(self):
        """Leading www. is dropped; invalid URLs give an empty domain."""
        assert source_domain("https://www.example.com/x") == "example.com"
        assert source_domain("#") == ""

    def test_short_text_is_collapsed_only(self):
        """Whitespace collapses; short text is not cut."""
        assert summarize("  a \n  b  ", max_chars=50) == "a b"

    def test_cut_at_sentence_end(self):
        """Long text is cut after the last sentence end beyond the minimum cut."""
        text = "A" * 90 + ". " + "B" * 50
        assert summarize(text, max_chars=120, min_cut=80) == "A" * 90 + "."

    def test_ellipsis_when_no_late_sentence_end(self):
        """Without a sentence end past the minimum cut an ellipsis is appended."""
        text = "Short. " + "C" * 200
        result = summarize(text, max_chars=100, min_cut=80)

        assert result.endswith("…")
        assert len(result) == 101


class TestRendering:
    """Article HTML fragments."""

    def test_article_fragment(self):
        """Title, date, domain, two-decimal score and escaped text."""
        article = Article(title="<b>Big</b>", url="https://www.example.com/a?x=1&y=2",
                          date="2024-01-01", score=0.5, lede="Lede", body="Body & more")
        fragment = render_article_html(article)

        assert "&lt;b&gt;Big&lt;/b&gt;" in fragment
        assert 'href="https://www.example.com/a?x=1&amp;y=2"' in fragment
        assert "🕒 2024-01-01" in fragment
        assert "🌐 example.com" in fragment
        assert "AI Score: 0.50" in fragment
        assert "📌 Summary:</strong> Lede" in fragment
        assert "Body &amp; more" in fragment

    def test_optional_parts_omitted(self):
        """No date, domain, score or lede means no markup for them."""
        fragment = render_article_html(Article("t", "#", "", None, "", "body"))

        assert "🕒" not in fragment
        assert "AI Score" not in fragment
        assert "Summary" not in fragment

    def test_placeholder(self):
        """Placeholder message is escaped."""
        assert "No &lt;articles&gt;" in render_placeholder_html("No <articles>")
