"""Tests for the declarative feedparser-based parser."""

import pytest

from rssproxy.errors import ParseError
from rssproxy.models import RawFeedDocument
from rssproxy.pipeline.parser import FeedParser, apply_fields

PODCAST_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Test Podcast</title>
    <link>https://pod.example.com/</link>
    <description>Talk</description>
    <generator>PodGen 1.0</generator>
    <itunes:author>Pod Host</itunes:author>
    <itunes:image href="https://pod.example.com/cover.jpg"/>
    <item>
      <title>Episode 1</title>
      <link>https://pod.example.com/ep1</link>
      <guid>https://pod.example.com/ep1</guid>
      <itunes:duration>00:42:00</itunes:duration>
      <itunes:episode>1</itunes:episode>
      <itunes:season>2</itunes:season>
      <media:thumbnail url="https://pod.example.com/ep1-thumb.jpg" width="100" height="100"/>
      <enclosure url="https://pod.example.com/ep1.mp3" type="audio/mpeg" length="999"/>
    </item>
  </channel>
</rss>"""


def _raw(text: str) -> RawFeedDocument:
    return RawFeedDocument(url="https://example.com/feed", text=text)


class TestRssParsing:
    def test_feed_fields(self, sample_rss):
        doc = FeedParser().parse(_raw(sample_rss))

        assert doc["title"] == "Test Feed"
        assert doc["description"] == "A feed for tests"
        assert doc["link"] == "https://example.com/"
        assert doc["language"] == "en-us"
        assert doc["version"] == "rss20"

    def test_item_count_matches_input(self, sample_rss):
        doc = FeedParser().parse(_raw(sample_rss))
        assert len(doc["items"]) == sample_rss.count("<item>")

    def test_item_fields_keep_their_own_names(self, sample_rss):
        item = FeedParser().parse(_raw(sample_rss))["items"][0]

        assert item["title"] == "First Article"
        assert item["link"] == "https://example.com/article-1"
        assert item["guid"] == "urn:example:1"
        assert item["description"] == "This is the first article summary."
        assert "Full body" in item["content"]
        assert item["content_snippet"] == "Full body"
        assert item["pub_date"] == "Wed, 05 Feb 2026 10:00:00 GMT"
        assert item["iso_date"] == "2026-02-05T10:00:00.000Z"
        assert item["creator"] == "Jane Doe"
        assert item["categories"] == ["Tech", "News"]
        assert item["media_content"]["url"] == "https://example.com/media-1.jpg"

    def test_item_without_guid_has_no_id(self, sample_rss):
        item = FeedParser().parse(_raw(sample_rss))["items"][1]
        assert "guid" not in item
        assert "id" not in item

    def test_enclosure(self, sample_rss):
        item = FeedParser().parse(_raw(sample_rss))["items"][2]
        assert item["enclosure"]["url"] == "https://example.com/episode-3.mp3"
        assert item["enclosure"]["type"] == "audio/mpeg"

    def test_podcast_fields(self):
        doc = FeedParser().parse(_raw(PODCAST_RSS))
        item = doc["items"][0]

        assert doc["generator"] == "PodGen 1.0"
        assert doc["author"] == "Pod Host"
        assert doc["image"] == "https://pod.example.com/cover.jpg"
        assert item["itunes_duration"] == "00:42:00"
        assert item["itunes_episode"] == "1"
        assert item["itunes_season"] == "2"
        assert item["media_thumbnail"]["url"] == "https://pod.example.com/ep1-thumb.jpg"
        assert item["enclosure"]["url"] == "https://pod.example.com/ep1.mp3"

    def test_minimal_rss(self):
        text = (
            "<rss><channel><title>T</title><item><title>A</title>"
            "<link>http://x/1</link></item></channel></rss>"
        )
        doc = FeedParser().parse(_raw(text))
        assert doc["title"] == "T"
        assert len(doc["items"]) == 1
        assert doc["items"][0]["title"] == "A"
        assert doc["items"][0]["link"] == "http://x/1"


    def test_untitled_item_is_kept(self):
        text = (
            '<rss version="2.0"><channel><title>T</title>'
            "<item><link>https://example.com/untitled</link></item>"
            "</channel></rss>"
        )
        doc = FeedParser().parse(_raw(text))

        assert len(doc["items"]) == 1
        assert "title" not in doc["items"][0]
        assert doc["items"][0]["link"] == "https://example.com/untitled"


class TestAtomParsing:
    def test_feed_fields(self, sample_atom):
        doc = FeedParser().parse(_raw(sample_atom))

        assert doc["version"].startswith("atom")
        assert doc["title"] == "Atom Test"
        assert doc["subtitle"] == "Atom subtitle"
        assert "description" not in doc
        assert doc["link"] == "https://atom.example.org/"

    def test_entry_fields(self, sample_atom):
        items = FeedParser().parse(_raw(sample_atom))["items"]

        assert len(items) == 2
        first, second = items
        assert first["id"] == "urn:uuid:entry-1"
        assert first["published"] == "2026-02-04T08:00:00Z"
        assert first["updated"] == "2026-02-05T08:00:00Z"
        assert first["author"] == {"name": "Alice"}
        assert first["summary"] == "Entry one summary"
        assert "guid" not in first
        assert "pub_date" not in first
        assert "Entry two body" in second["content"]
        assert second["iso_date"] == "2026-02-03T08:00:00.000Z"


class TestParseErrors:
    def test_malformed_xml_raises(self, malformed_rss):
        with pytest.raises(ParseError) as info:
            FeedParser().parse(_raw(malformed_rss))
        assert info.value.kind == "malformed_xml"

    def test_non_feed_document_raises(self):
        with pytest.raises(ParseError):
            FeedParser().parse(_raw("<html><body><p>Not a feed</p></body></html>"))

    def test_plain_text_raises(self):
        with pytest.raises(ParseError):
            FeedParser().parse(_raw("this is not xml at all"))


class TestFieldMap:
    def test_custom_item_fields(self, sample_rss):
        parser = FeedParser(item_fields=(("title", "headline", str.upper),))
        item = parser.parse(_raw(sample_rss))["items"][0]
        assert item["headline"] == "FIRST ARTICLE"
        assert item["title"] == "First Article"

    def test_apply_fields_tries_keys_in_order(self):
        fields = ((("missing", "b"), "out", None),)
        assert apply_fields({"b": 2}, fields) == {"out": 2}
        assert apply_fields({}, fields) == {}
